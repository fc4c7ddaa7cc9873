"""
services/book_aggregator.py
---------------------------
Turns the flat rows of the books/chapters join into one nested Book.

Pure functions only: no database access and no logging, so the
transformation can be tested in isolation.
"""

from typing import Sequence

from errors import BookNotFoundError
from models.book import Book, Chapter
from models.rows import BookChapterRow


def _row_to_chapter(row: BookChapterRow) -> Chapter:
    """Convert the chapter half of a join row to a Chapter."""
    return Chapter(
        id=row.chapter_id,
        book_id=row.book_id,
        title=row.chapter_title or "",
        summary=row.chapter_summary,
        audio_url=row.chapter_audio_url,
        # Stored rows default to 0; NULL only shows up for rows inserted with an explicit NULL.
        order_num=row.chapter_order_num if row.chapter_order_num is not None else 0,
        created_at=row.chapter_created_at,
    )


def aggregate(rows: Sequence[BookChapterRow]) -> Book:
    """
    Nest the chapters of a single book under it.

    Args:
        rows: Join rows of one book, already sorted by chapter order.
            The order is kept as given.

    Returns:
        The Book with its chapters. A book without chapters gets an
        empty list.

    Raises:
        BookNotFoundError: If `rows` is empty.
    """
    if not rows:
        raise BookNotFoundError()

    first = rows[0]
    return Book(
        id=first.book_id,
        title=first.book_title,
        author=first.book_author,
        description=first.book_description,
        cover_url=first.book_cover_url,
        year=first.book_year,
        created_at=first.book_created_at,
        updated_at=first.book_updated_at,
        chapters=[_row_to_chapter(row) for row in rows if row.has_chapter],
    )
