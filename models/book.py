"""
models/book.py
--------------
Domain models for catalog books and their chapters.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Chapter:
    """
    A titled unit of a book.

    Attributes:
        id: Database primary key.
        book_id: Identifier of the owning book.
        title: Chapter title.
        summary: Optional short summary.
        audio_url: Optional link to the narrated audio.
        order_num: Sort position inside the book (not unique).
        created_at: Timestamp when the record was created.
    """
    id: str
    book_id: str
    title: str
    summary: str | None = None
    audio_url: str | None = None
    order_num: int = 0
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        """JSON representation sent to API clients."""
        return {
            "id": self.id,
            "bookId": self.book_id,
            "title": self.title,
            "summary": self.summary,
            "audioUrl": self.audio_url,
            "orderNum": self.order_num,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class Book:
    """
    A catalog entry.

    Attributes:
        id: Database primary key (generated by the database).
        title: Book title.
        author: Author name.
        description: Optional blurb.
        cover_url: Optional link to the cover image.
        year: Optional publication year as a 4-character string.
        created_at: Timestamp when the record was created.
        updated_at: Timestamp of the last update.
        chapters: Chapters sorted by `order_num`; only filled for the
            single-book view.
    """
    id: str
    title: str
    author: str
    description: str | None = None
    cover_url: str | None = None
    year: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    chapters: list[Chapter] = field(default_factory=list)

    def to_dict(self, include_chapters: bool = True) -> dict:
        """
        JSON representation sent to API clients.

        Args:
            include_chapters: False for the list view, which omits the
                `chapters` key entirely.
        """
        data = {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "description": self.description,
            "coverUrl": self.cover_url,
            "year": self.year,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_chapters:
            data["chapters"] = [chapter.to_dict() for chapter in self.chapters]
        return data

    def __str__(self) -> str:
        return f"{self.title} by {self.author} ({len(self.chapters)} chapters)"
