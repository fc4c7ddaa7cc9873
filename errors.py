"""
errors.py
---------
Typed failures raised by the data layer.
Handlers translate them into HTTP status codes; nothing below the
handlers decides what a failure looks like on the wire.
"""


class CatalogError(Exception):
    """Base class for every catalog data-layer failure."""


class DatabaseConnectionError(CatalogError):
    """The connection pool could not be created. Fatal at startup."""


class DataUnavailableError(CatalogError):
    """No database is configured (degraded mode)."""

    def __init__(self, message: str = "Database connection is not available"):
        super().__init__(message)


class QueryError(CatalogError):
    """The database was reachable but the query failed."""


class BookNotFoundError(CatalogError):
    """No book matches the requested identifier."""

    def __init__(self, book_id: str | None = None):
        self.book_id = book_id
        super().__init__(f"Book not found: {book_id}" if book_id else "Book not found")
