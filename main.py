"""
main.py
-------
Entry point for the Book Catalog API.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Build the FastAPI application around the book repository.
    - Serve it with uvicorn and close the pool on shutdown.
"""

import sys

import uvicorn
from fastapi import FastAPI

from config import DATABASE_URL, HOST, PORT
from db.connection import ConnectionPool, init_pool
from db.init_db import ensure_schema
from errors import DatabaseConnectionError
from handlers.app import create_app
from repositories.book_repo import BookRepository
from utils.logger import get_logger

logger = get_logger(__name__)


def build_app(database_url: str) -> tuple[ConnectionPool | None, FastAPI]:
    """
    Open the pool, check the database answers, create the schema and
    wire the application.

    Raises:
        DatabaseConnectionError: If a database is configured but cannot
            be reached.
    """
    db_pool = init_pool(database_url)
    if db_pool is not None and not db_pool.ping():
        db_pool.close()
        raise DatabaseConnectionError("Database did not answer the startup check")
    ensure_schema(db_pool)
    return db_pool, create_app(BookRepository(db_pool))


def main() -> None:
    """Initialize and run the API server."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    try:
        db_pool, app = build_app(DATABASE_URL)
    except DatabaseConnectionError as e:
        logger.critical(f"Cannot start without the database: {e}")
        sys.exit(1)

    logger.info(f"Server starting on port {PORT}")
    logger.info("Endpoints:")
    logger.info("   GET  /health")
    logger.info("   GET  /api/books")
    logger.info("   GET  /api/books/{id}")

    # ── 2. Serve until interrupted ────────────────────────
    try:
        uvicorn.run(app, host=HOST, port=PORT, log_config=None)
    finally:
        # ── 3. Cleanup on shutdown ────────────────────────
        if db_pool is not None:
            db_pool.close()
        logger.info("Book Catalog API stopped.")


if __name__ == "__main__":
    main()
