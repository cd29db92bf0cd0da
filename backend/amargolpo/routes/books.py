"""
AmarGolpo Backend — Book Route Handlers
=========================================

What:  CRUD endpoints for stories ("books") and the rating update.
How:   Each handler extracts the path/body, delegates to BookService, and
       returns the result. Errors are raised as application exceptions and
       formatted by the global handlers in main.py.

Endpoints:
    GET    /books          all books
    GET    /books/{id}     one book, or {} when no book has that id
    POST   /books          insert a free-form book document
    PUT    /books/{id}     {"ratingUpdate": {...}} or a partial update
    DELETE /books/{id}     delete by id (deletedCount 0 when absent)

Books are free-form documents, so responses are the stored documents with
`_id` as a string rather than a fixed schema.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from amargolpo.config import Settings
from amargolpo.database import DocumentStore, get_settings, get_store
from amargolpo.schemas.book import BookRatingResponse, BookUpdateResponse
from amargolpo.schemas.common import DeleteResult, ErrorResponse, InsertResult
from amargolpo.services.book_service import book_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/books", tags=["Books"])

_STORE_ERROR = {500: {"description": "Document store failure", "model": ErrorResponse}}
_BAD_ID = {400: {"description": "Malformed book id", "model": ErrorResponse}}


@router.get(
    "",
    responses=_STORE_ERROR,
    summary="List all books",
)
async def list_books(store: DocumentStore = Depends(get_store)) -> List[Dict[str, Any]]:
    books = await book_service.list_books(store)
    return [book.to_response() for book in books]


@router.get(
    "/{book_id}",
    responses={**_BAD_ID, **_STORE_ERROR},
    summary="Get a single book",
    description="Returns the book document, or an empty object when no book has this id.",
)
async def get_book(book_id: str, store: DocumentStore = Depends(get_store)) -> Dict[str, Any]:
    book = await book_service.get_book(store, book_id)
    return book.to_response() if book else {}


@router.post(
    "",
    status_code=201,
    response_model=InsertResult,
    responses=_STORE_ERROR,
    summary="Add a book",
)
async def create_book(
    payload: Dict[str, Any] = Body(..., description="Book fields (title, text, author, ...)"),
    store: DocumentStore = Depends(get_store),
) -> InsertResult:
    return await book_service.create_book(store, payload)


@router.put(
    "/{book_id}",
    response_model=None,
    responses={
        200: {"description": "Rating recorded or fields updated"},
        **_BAD_ID,
        404: {"description": "Book not found", "model": ErrorResponse},
        **_STORE_ERROR,
    },
    summary="Rate or update a book",
    description=(
        "With a `ratingUpdate` object the user's rating is recorded (one per user) "
        "and the new average is returned as `avgRating`. Any other body is applied "
        "as a partial update of the book's fields."
    ),
)
async def update_book(
    book_id: str,
    payload: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
    config: Settings = Depends(get_settings),
) -> BookRatingResponse | BookUpdateResponse:
    return await book_service.update_book(
        store, book_id, payload, empty_policy=config.empty_rating_policy
    )


@router.delete(
    "/{book_id}",
    response_model=DeleteResult,
    responses={**_BAD_ID, **_STORE_ERROR},
    summary="Delete a book",
)
async def delete_book(book_id: str, store: DocumentStore = Depends(get_store)) -> DeleteResult:
    return await book_service.delete_book(store, book_id)
