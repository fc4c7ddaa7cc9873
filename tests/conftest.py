"""Shared fixtures: an in-memory stand-in for the PostgreSQL pool."""

from contextlib import contextmanager
from datetime import datetime, timedelta

import psycopg2
import pytest
from fastapi.testclient import TestClient
from psycopg2 import pool

from db.init_db import BOOKS_TABLE_SQL, CHAPTERS_TABLE_SQL, INDEXES_SQL
from handlers.app import create_app
from repositories.book_repo import BOOK_WITH_CHAPTERS_SQL, LIST_BOOKS_SQL, BookRepository

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)

_SCHEMA_STEPS = {
    BOOKS_TABLE_SQL: "books",
    CHAPTERS_TABLE_SQL: "chapters",
    INDEXES_SQL: "indexes",
}


class FakeDatabase:
    """Rows for the two catalog tables plus the schema objects created so far."""

    def __init__(self):
        self.books: list[dict] = []
        self.chapters: list[dict] = []
        self.schema: set[str] = set()
        self.executed: list[tuple[str, tuple | None]] = []
        self.fail_statements: set[str] = set()

    def add_book(self, book_id: str, title: str = "Title", author: str = "Author", **extra) -> dict:
        created = BASE_TIME + timedelta(minutes=len(self.books))
        book = {
            "id": book_id,
            "title": title,
            "author": author,
            "description": extra.get("description"),
            "cover_url": extra.get("cover_url"),
            "year": extra.get("year"),
            "created_at": extra.get("created_at", created),
            "updated_at": extra.get("updated_at", created),
        }
        self.books.append(book)
        return book

    def add_chapter(self, chapter_id: str, book_id: str, title: str, order_num: int | None = 0, **extra) -> dict:
        chapter = {
            "id": chapter_id,
            "book_id": book_id,
            "title": title,
            "summary": extra.get("summary"),
            "audio_url": extra.get("audio_url"),
            "order_num": order_num,
            "created_at": extra.get("created_at", BASE_TIME + timedelta(hours=1, minutes=len(self.chapters))),
        }
        self.chapters.append(chapter)
        return chapter

    # ── query emulation ───────────────────────────────────

    def run(self, sql: str, params: tuple | None) -> list[tuple]:
        self.executed.append((sql, params))
        if sql in self.fail_statements:
            raise psycopg2.ProgrammingError(f"statement failed: {sql.strip().splitlines()[0]}")
        if sql in _SCHEMA_STEPS:
            self.schema.add(_SCHEMA_STEPS[sql])
            return []
        if sql == LIST_BOOKS_SQL:
            ordered = sorted(self.books, key=lambda b: b["created_at"], reverse=True)
            return [self._book_columns(b) for b in ordered]
        if sql == BOOK_WITH_CHAPTERS_SQL:
            return self._book_with_chapters(params[0])
        raise AssertionError(f"Unexpected SQL: {sql}")

    @staticmethod
    def _book_columns(book: dict) -> tuple:
        return (
            book["id"], book["title"], book["author"], book["description"],
            book["cover_url"], book["year"], book["created_at"], book["updated_at"],
        )

    def _book_with_chapters(self, book_id: str) -> list[tuple]:
        book = next((b for b in self.books if b["id"] == book_id), None)
        if book is None:
            return []
        chapters = [c for c in self.chapters if c["book_id"] == book_id]
        if not chapters:
            return [self._book_columns(book) + (None,) * 6]
        chapters.sort(key=lambda c: (c["order_num"] is None, c["order_num"] or 0, c["created_at"], c["id"]))
        return [
            self._book_columns(book)
            + (c["id"], c["title"], c["summary"], c["audio_url"], c["order_num"], c["created_at"])
            for c in chapters
        ]


class FakeCursor:
    def __init__(self, db: FakeDatabase):
        self.db = db
        self._result: list[tuple] = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self._result = self.db.run(sql, params)

    def fetchall(self):
        return list(self._result)

    def fetchone(self):
        return self._result[0] if self._result else None


class FakeConnection:
    def __init__(self, db: FakeDatabase):
        self.db = db
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        return FakeCursor(self.db)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


class FakePool:
    """Duck-typed ConnectionPool backed by a FakeDatabase."""

    def __init__(self, db: FakeDatabase):
        self.db = db
        self.conn = FakeConnection(db)
        self.checkouts = 0
        self.exhausted = False
        self.healthy = True
        self.closed = False

    @contextmanager
    def connection(self):
        if self.exhausted:
            raise pool.PoolError("No database connection became free within 30s")
        self.checkouts += 1
        try:
            yield self.conn
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise

    def ping(self):
        return self.healthy

    def close(self):
        self.closed = True


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def fake_pool(fake_db: FakeDatabase) -> FakePool:
    return FakePool(fake_db)


@pytest.fixture
def book_repo(fake_pool: FakePool) -> BookRepository:
    return BookRepository(fake_pool)


@pytest.fixture
def client(book_repo: BookRepository):
    with TestClient(create_app(book_repo)) as test_client:
        yield test_client


@pytest.fixture
def degraded_client():
    with TestClient(create_app(BookRepository(None))) as test_client:
        yield test_client
