"""
handlers/app.py
---------------
FastAPI application factory. Wires routers, CORS and middleware around
a BookRepository built by the caller.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ALLOWED_ORIGINS, REQUEST_TIMEOUT_SECONDS
from handlers import book_handler, health_handler
from handlers.middleware import register_middleware
from repositories.book_repo import BookRepository


def create_app(
    book_repository: BookRepository,
    timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
) -> FastAPI:
    """
    Build the HTTP application.

    Args:
        book_repository: Repository shared by all requests.
        timeout_seconds: Upper bound for a single request.

    Returns:
        A ready-to-serve FastAPI app.
    """
    app = FastAPI(
        title="Book Catalog API",
        description="Read-only catalog of books and their chapters.",
        version="1.0.0",
    )
    app.state.book_repository = book_repository

    register_middleware(app, timeout_seconds)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Authorization", "Content-Type", "X-CSRF-Token"],
        expose_headers=["Link"],
        max_age=300,
    )

    app.include_router(health_handler.router)
    app.include_router(book_handler.router)
    return app
