"""
models/rows.py
--------------
Row shapes returned by the book queries.
These never leave the data layer; repositories turn them into domain models.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence


@dataclass(frozen=True)
class BookChapterRow:
    """
    One record of the books LEFT JOIN chapters query.

    The book columns are repeated on every row of the same book. The
    chapter columns are all None when the book has no chapters, in which
    case the book appears exactly once.
    """
    book_id: str
    book_title: str
    book_author: str
    book_description: str | None
    book_cover_url: str | None
    book_year: str | None
    book_created_at: datetime | None
    book_updated_at: datetime | None
    chapter_id: str | None = None
    chapter_title: str | None = None
    chapter_summary: str | None = None
    chapter_audio_url: str | None = None
    chapter_order_num: int | None = None
    chapter_created_at: datetime | None = None

    @property
    def has_chapter(self) -> bool:
        return self.chapter_id is not None

    @classmethod
    def from_record(cls, record: Sequence) -> "BookChapterRow":
        """Build a row from a database tuple in BOOK_WITH_CHAPTERS_SQL column order."""
        return cls(*record)
