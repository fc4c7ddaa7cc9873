"""
handlers/middleware.py
----------------------
HTTP middleware: request logging, crash recovery and the per-request timeout.
"""

import time

import anyio
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from utils.logger import get_logger

logger = get_logger(__name__)


class RequestTimeoutMiddleware:
    """
    Cancel a request that runs longer than `timeout_seconds` and answer 504.

    Cancellation reaches the route through anyio, so routes that hand
    blocking work to `anyio.to_thread.run_sync(..., abandon_on_cancel=True)`
    return at the deadline instead of when the thread finishes.
    """

    def __init__(self, app: ASGIApp, timeout_seconds: float):
        self.app = app
        self.timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_tracking(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        with anyio.move_on_after(self.timeout_seconds) as deadline:
            await self.app(scope, receive, send_tracking)

        if deadline.cancelled_caught:
            logger.warning(
                f"Request timed out after {self.timeout_seconds}s: "
                f"{scope['method']} {scope['path']}"
            )
            if not response_started:
                response = JSONResponse(status_code=504, content={"detail": "Request timed out"})
                await response(scope, receive, send)


def register_middleware(app: FastAPI, timeout_seconds: float) -> None:
    """
    Attach the middleware stack to `app`.

    The last registered middleware runs first, so requests pass through
    logging, then crash recovery, then the timeout.
    """
    app.add_middleware(RequestTimeoutMiddleware, timeout_seconds=timeout_seconds)

    @app.middleware("http")
    async def recover_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception(f"Unhandled error in {request.method} {request.url.path}")
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        client = request.client.host if request.client else "-"
        logger.info(
            f'"{request.method} {request.url.path}" {response.status_code} '
            f"from {client} in {duration_ms:.1f}ms"
        )
        return response
