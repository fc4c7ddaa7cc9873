"""
handlers/health_handler.py
--------------------------
Liveness endpoint for infrastructure monitoring.
Answers without touching the database.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    """Report that the process is up and serving."""
    return {
        "status": "healthy",
        "message": "API is running smoothly",
        "time": datetime.now(timezone.utc).isoformat(timespec="seconds"),
    }
