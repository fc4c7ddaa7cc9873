"""
handlers/book_handler.py
------------------------
Book endpoints. Each handler asks the BookRepository for data and maps
the data-layer errors to HTTP status codes. No business logic lives here.

Repository calls block on the database, so they run in a worker thread
that the request timeout can abandon.
"""

from anyio import to_thread
from fastapi import APIRouter, Depends, HTTPException, Request

from errors import BookNotFoundError, DataUnavailableError, QueryError
from repositories.book_repo import BookRepository
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["books"])


def get_book_repository(request: Request) -> BookRepository:
    """Dependency returning the repository created at startup."""
    return request.app.state.book_repository


@router.get("/books")
async def list_books(repo: BookRepository = Depends(get_book_repository)) -> list[dict]:
    """List all books, newest first, without chapters."""
    try:
        books = await to_thread.run_sync(repo.list_books, abandon_on_cancel=True)
    except DataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except QueryError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return [book.to_dict(include_chapters=False) for book in books]


@router.get("/books/{book_id}")
async def get_book(book_id: str, repo: BookRepository = Depends(get_book_repository)) -> dict:
    """Get one book with its chapters in reading order."""
    try:
        book = await to_thread.run_sync(
            repo.get_book_with_chapters, book_id, abandon_on_cancel=True
        )
    except DataUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except BookNotFoundError:
        logger.info(f"Book {book_id} not found")
        raise HTTPException(status_code=404, detail="Book not found")
    except QueryError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return book.to_dict()
