"""
AmarGolpo Backend — Book Service
==================================

What:  CRUD for stories plus the rating update path.
How:   Each method receives the DocumentStore, performs one read or write on
       the `books` collection (two for ratings), and returns typed results.
Who:   Called by routes/books.py.

Rating update flow (PUT /books/{id} with ratingUpdate):
    find_one(_id) ─▶ apply_rating() ─▶ update_one($set ratings, rating)
    The three steps are not atomic: two users rating the same book at the
    same moment can overwrite each other's entry (last write wins).

Error Handling Strategy:
    PyMongoError from the driver is wrapped in DatabaseError with the driver
    message in context["reason"]. Our own exceptions propagate as-is.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as SchemaValidationError
from pymongo.errors import PyMongoError

from amargolpo.config import EmptyRatingPolicy, settings
from amargolpo.database import DocumentStore, parse_object_id
from amargolpo.exceptions import DatabaseError, NotFoundError, ValidationError
from amargolpo.models.book import Book, RatingEntry
from amargolpo.schemas.book import BookRatingResponse, BookUpdateResponse, RatingUpdate
from amargolpo.schemas.common import DeleteResult, InsertResult, UpdateResult
from amargolpo.services.ratings import apply_rating

logger = logging.getLogger(__name__)

# Fields a plain PUT may not touch: the id is store-assigned and the rating
# fields are only written through the rating aggregator.
PROTECTED_FIELDS = frozenset({"_id", "ratings", "rating"})


def _store_error(action: str, error: PyMongoError, **context: Any) -> DatabaseError:
    logger.error("Store error while %s: %s", action, str(error))
    return DatabaseError(
        message=f"Error {action}",
        context={"reason": str(error), **context},
    )


class BookService:
    """
    Business logic layer for books.

    Responsibilities:
        - list_books / get_book: reads
        - create_book / delete_book: unconditional writes
        - update_book: dispatches to rate_book() or a partial $set
    """

    async def list_books(self, store: DocumentStore) -> List[Book]:
        try:
            docs = await store.books.find().to_list(length=None)
        except PyMongoError as e:
            raise _store_error("fetching books", e)
        return [Book.model_validate(doc) for doc in docs]

    async def get_book(self, store: DocumentStore, book_id: str) -> Optional[Book]:
        """Returns None when no book has this id; malformed ids raise ValidationError."""
        oid = parse_object_id(book_id, "book")
        try:
            doc = await store.books.find_one({"_id": oid})
        except PyMongoError as e:
            raise _store_error("fetching book", e, book_id=book_id)
        if doc is None:
            return None
        return Book.model_validate(doc)

    async def create_book(self, store: DocumentStore, payload: Dict[str, Any]) -> InsertResult:
        document = {key: value for key, value in payload.items() if key != "_id"}
        try:
            result = await store.books.insert_one(document)
        except PyMongoError as e:
            raise _store_error("adding book", e)
        logger.info("Book created: %s", result.inserted_id)
        return InsertResult.from_result(result)

    async def update_book(
        self,
        store: DocumentStore,
        book_id: str,
        payload: Dict[str, Any],
        empty_policy: Optional[EmptyRatingPolicy] = None,
    ) -> Union[BookRatingResponse, BookUpdateResponse]:
        """
        Apply a PUT /books/{id} body.

        A body with `ratingUpdate` goes through the rating aggregator; any
        other body is written as a partial update of the remaining fields.

        Raises:
            ValidationError: Malformed id, incomplete ratingUpdate, or no
                             updatable fields.
            NotFoundError:   No book with this id.
            DatabaseError:   Store operation failed.
        """
        oid = parse_object_id(book_id, "book")

        if "ratingUpdate" in payload:
            try:
                rating_update = RatingUpdate.model_validate(payload["ratingUpdate"])
            except SchemaValidationError:
                raise ValidationError(
                    message="ratingUpdate must be an object with userId and a finite numeric rating",
                    field="ratingUpdate",
                )
            return await self.rate_book(store, book_id, rating_update, empty_policy)

        changes = {key: value for key, value in payload.items() if key not in PROTECTED_FIELDS}
        if not changes:
            raise ValidationError(message="No updatable fields in request body")

        try:
            result = await store.books.update_one({"_id": oid}, {"$set": changes})
        except PyMongoError as e:
            raise _store_error("updating book", e, book_id=book_id)

        if result.matched_count == 0:
            raise NotFoundError(resource="book", resource_id=book_id)

        logger.info("Book %s updated: fields=%s", book_id, sorted(changes))
        return BookUpdateResponse(message="Book updated", result=UpdateResult.from_result(result))

    async def rate_book(
        self,
        store: DocumentStore,
        book_id: str,
        rating_update: RatingUpdate,
        empty_policy: Optional[EmptyRatingPolicy] = None,
    ) -> BookRatingResponse:
        """
        Record one user's rating and store the new mean.

        Returns only the new mean (avgRating), not the updated document.
        """
        oid = parse_object_id(book_id, "book")
        if not rating_update.user_id:
            raise ValidationError(message="ratingUpdate.userId is required", field="userId")
        if rating_update.rating is None:
            raise ValidationError(message="ratingUpdate.rating is required", field="rating")

        policy = empty_policy or settings.empty_rating_policy

        try:
            doc = await store.books.find_one({"_id": oid}, {"ratings": 1})
        except PyMongoError as e:
            raise _store_error("updating rating", e, book_id=book_id)
        if doc is None:
            raise NotFoundError(resource="book", resource_id=book_id)

        try:
            current = [RatingEntry.model_validate(entry) for entry in doc.get("ratings") or []]
        except (SchemaValidationError, TypeError):
            raise ValidationError(
                message="Stored ratings are not a list of {userId, rating} entries",
                field="ratings",
                context={"book_id": book_id},
            )
        outcome = apply_rating(current, rating_update.user_id, rating_update.rating, policy)

        update: Dict[str, Any] = {
            "$set": {"ratings": [entry.model_dump(by_alias=True) for entry in outcome.ratings]},
        }
        if outcome.formatted is None:
            update["$unset"] = {"rating": ""}
        else:
            update["$set"]["rating"] = outcome.formatted

        try:
            await store.books.update_one({"_id": oid}, update)
        except PyMongoError as e:
            raise _store_error("updating rating", e, book_id=book_id)

        logger.info(
            "Book %s rated by %s: %s (avg %s over %d)",
            book_id, rating_update.user_id, rating_update.rating,
            outcome.formatted, len(outcome.ratings),
        )
        return BookRatingResponse(message="Rating updated", avg_rating=outcome.average)

    async def delete_book(self, store: DocumentStore, book_id: str) -> DeleteResult:
        oid = parse_object_id(book_id, "book")
        try:
            result = await store.books.delete_one({"_id": oid})
        except PyMongoError as e:
            raise _store_error("deleting book", e, book_id=book_id)
        logger.info("Book %s delete: deleted_count=%d", book_id, result.deleted_count)
        return DeleteResult.from_result(result)


# ── Singleton Instance ────────────────────────────────────────────────────
book_service = BookService()
