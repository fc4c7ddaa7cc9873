"""
db/init_db.py
-------------
Creates the database schema (tables and indexes) if it does not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

import psycopg2

from db.connection import ConnectionPool
from utils.logger import get_logger

logger = get_logger(__name__)

# Books table: catalog entries
BOOKS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS books (
    id              VARCHAR(36) PRIMARY KEY DEFAULT gen_random_uuid(),
    title           VARCHAR(255) NOT NULL,
    author          VARCHAR(255) NOT NULL,
    description     TEXT,
    cover_url       TEXT,
    year            VARCHAR(4),
    created_at      TIMESTAMP DEFAULT NOW(),
    updated_at      TIMESTAMP DEFAULT NOW()
);
"""

# Chapters table: ordered units of a book, removed together with it
CHAPTERS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS chapters (
    id              VARCHAR(36) PRIMARY KEY DEFAULT gen_random_uuid(),
    book_id         VARCHAR(36) NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    title           VARCHAR(255) NOT NULL,
    summary         TEXT,
    audio_url       TEXT,
    order_num       INTEGER DEFAULT 0,
    created_at      TIMESTAMP DEFAULT NOW()
);
"""

# Indexes for faster lookups
INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_books_author ON books(author);
CREATE INDEX IF NOT EXISTS idx_chapters_book_id ON chapters(book_id);
"""

SCHEMA_STEPS: list[tuple[str, str]] = [
    ("books table", BOOKS_TABLE_SQL),
    ("chapters table", CHAPTERS_TABLE_SQL),
    ("indexes", INDEXES_SQL),
]


def ensure_schema(db_pool: ConnectionPool | None) -> list[str]:
    """
    Create the books/chapters tables and their indexes.

    Safe to call multiple times and from several instances at once
    (uses IF NOT EXISTS). Each step runs in its own transaction; a failing
    step is logged and the next one is still attempted, because another
    instance may be creating the same objects concurrently.

    Args:
        db_pool: The shared pool, or None in degraded mode.

    Returns:
        Names of the steps that failed (empty when everything succeeded).
    """
    if db_pool is None:
        logger.warning("No database configured; skipping schema initialization.")
        return []

    failed: list[str] = []
    for name, sql in SCHEMA_STEPS:
        try:
            with db_pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql)
        except psycopg2.Error as e:
            logger.warning(f"Could not create {name}: {e}")
            failed.append(name)

    if failed:
        logger.warning(f"Database schema initialized with failures: {', '.join(failed)}")
    else:
        logger.info("Database schema initialized successfully.")
    return failed


if __name__ == "__main__":
    from config import DATABASE_URL
    from db.connection import init_pool

    schema_pool = init_pool(DATABASE_URL)
    if schema_pool is None:
        raise SystemExit("DATABASE_URL is not set.")
    try:
        if ensure_schema(schema_pool):
            raise SystemExit(1)
        print("Database schema created successfully.")
    finally:
        schema_pool.close()
