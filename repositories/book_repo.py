"""
repositories/book_repo.py
-------------------------
Data access layer for books and their chapters.
All SQL queries related to the `books` and `chapters` tables live here.
"""

import psycopg2

from db.connection import ConnectionPool
from errors import DataUnavailableError, QueryError
from models.book import Book
from models.rows import BookChapterRow
from services.book_aggregator import aggregate
from utils.logger import get_logger

logger = get_logger(__name__)

LIST_BOOKS_SQL = """
    SELECT id, title, author, description, cover_url, year, created_at, updated_at
    FROM books
    ORDER BY created_at DESC;
"""

# Column order must match BookChapterRow.
BOOK_WITH_CHAPTERS_SQL = """
    SELECT
        b.id, b.title, b.author, b.description, b.cover_url, b.year,
        b.created_at, b.updated_at,
        c.id, c.title, c.summary, c.audio_url, c.order_num, c.created_at
    FROM books b
    LEFT JOIN chapters c ON b.id = c.book_id
    WHERE b.id = %s
    ORDER BY c.order_num ASC, c.created_at ASC, c.id ASC;
"""


class BookRepository:
    """Read-only repository for the books and chapters tables."""

    def __init__(self, db_pool: ConnectionPool | None):
        """
        Args:
            db_pool: Shared connection pool, or None in degraded mode.
        """
        self.db_pool = db_pool

    def _require_pool(self) -> ConnectionPool:
        if self.db_pool is None:
            raise DataUnavailableError()
        return self.db_pool

    # ── READ ──────────────────────────────────────────────

    def list_books(self) -> list[Book]:
        """
        Fetch every book, newest first. Chapters are not loaded.

        Returns:
            List of Book objects (possibly empty).

        Raises:
            DataUnavailableError: If no database is configured.
            QueryError: If the query fails.
        """
        db_pool = self._require_pool()
        try:
            with db_pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(LIST_BOOKS_SQL)
                    records = cur.fetchall()
        except psycopg2.Error as e:
            logger.error(f"Error fetching books from database: {e}")
            raise QueryError("Failed to fetch books") from e
        return [self._row_to_book(r) for r in records]

    def get_book_with_chapters(self, book_id: str) -> Book:
        """
        Fetch a single book with its chapters sorted by order number.

        Args:
            book_id: Primary key of the book.

        Returns:
            The Book with `chapters` populated (empty list if it has none).

        Raises:
            DataUnavailableError: If no database is configured.
            QueryError: If the query fails.
            BookNotFoundError: If no book has this id.
        """
        db_pool = self._require_pool()
        try:
            with db_pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(BOOK_WITH_CHAPTERS_SQL, (book_id,))
                    records = cur.fetchall()
        except psycopg2.Error as e:
            logger.error(f"Error fetching book {book_id} with chapters: {e}")
            raise QueryError("Failed to fetch book") from e

        rows = [BookChapterRow.from_record(r) for r in records]
        book = aggregate(rows)
        logger.debug(f"Loaded book {book.id} with {len(book.chapters)} chapters")
        return book

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_book(row: tuple) -> Book:
        """Convert a database row tuple to a Book domain object."""
        return Book(
            id=row[0],
            title=row[1],
            author=row[2],
            description=row[3],
            cover_url=row[4],
            year=row[5],
            created_at=row[6],
            updated_at=row[7],
        )
