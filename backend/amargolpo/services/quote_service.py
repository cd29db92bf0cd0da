"""
AmarGolpo Backend — Quote Service
===================================

What:  Listing, creation, deletion and like toggling for quotes.
Who:   Called by routes/quotes.py.

Like toggle flow (PUT /quotes/{id}/like):
    find_one(_id) ─▶ toggle_like() ─▶ update_one($set likes)
    Like the rating path this is read-modify-write: two users toggling the
    same quote concurrently can lose one of the two changes.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from amargolpo.config import settings
from amargolpo.database import DocumentStore, parse_object_id
from amargolpo.exceptions import DatabaseError, NotFoundError, ValidationError
from amargolpo.models.quote import Quote
from amargolpo.schemas.common import DeleteResult, InsertResult
from amargolpo.schemas.quote import LikesCountResponse, QuoteCreate
from amargolpo.services.likes import toggle_like

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("text", "author", "category")


class QuoteService:

    async def list_quotes(
        self,
        store: DocumentStore,
        category: Optional[str] = None,
    ) -> List[Quote]:
        """All quotes, newest first, optionally restricted to one category."""
        query = {"category": category} if category else {}
        try:
            cursor = store.quotes.find(query).sort("createdAt", DESCENDING)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error("Store error fetching quotes: %s", str(e))
            raise DatabaseError(message="Error fetching quotes", context={"reason": str(e)})
        return [Quote.model_validate(doc) for doc in docs]

    async def create_quote(self, store: DocumentStore, payload: QuoteCreate) -> InsertResult:
        """
        Insert a quote with an empty like set and a server timestamp.

        Raises:
            ValidationError: text, author or category is missing or empty.
        """
        missing = [name for name in REQUIRED_FIELDS if not getattr(payload, name)]
        if missing:
            raise ValidationError(
                message=f"Missing required fields: {', '.join(missing)}",
                context={"fields": missing},
            )

        document = {
            "text": payload.text,
            "author": payload.author,
            "category": payload.category,
            "likes": [],
            "createdAt": datetime.now(timezone.utc),
        }
        try:
            result = await store.quotes.insert_one(document)
        except PyMongoError as e:
            logger.error("Store error adding quote: %s", str(e))
            raise DatabaseError(message="Error adding quote", context={"reason": str(e)})

        logger.info("Quote created: %s (category=%s)", result.inserted_id, payload.category)
        return InsertResult.from_result(result)

    async def toggle_like(
        self,
        store: DocumentStore,
        quote_id: str,
        user_id: Optional[str],
        require_user_id: Optional[bool] = None,
    ) -> LikesCountResponse:
        """
        Like the quote for `user_id`, or unlike it if already liked.

        When user_id is missing and require_user_id is off, nothing is
        written and the current count is returned.

        Raises:
            ValidationError: Malformed id, or missing userId while required.
            NotFoundError:   No quote with this id.
            DatabaseError:   Store operation failed.
        """
        oid = parse_object_id(quote_id, "quote")
        if require_user_id is None:
            require_user_id = settings.require_like_user_id
        if not user_id and require_user_id:
            raise ValidationError(message="userId is required", field="userId")

        try:
            doc = await store.quotes.find_one({"_id": oid}, {"likes": 1})
            if doc is None:
                raise NotFoundError(resource="quote", resource_id=quote_id)

            current = doc.get("likes") or []
            if not user_id:
                return LikesCountResponse(likes_count=len(current), liked=False)

            toggled = toggle_like(current, user_id)
            await store.quotes.update_one({"_id": oid}, {"$set": {"likes": toggled.likes}})
        except PyMongoError as e:
            logger.error("Store error toggling like on %s: %s", quote_id, str(e))
            raise DatabaseError(
                message="Error updating likes",
                context={"reason": str(e), "quote_id": quote_id},
            )

        logger.info(
            "Quote %s %s by %s (likes=%d)",
            quote_id, "liked" if toggled.liked else "unliked", user_id, toggled.count,
        )
        return LikesCountResponse(likes_count=toggled.count, liked=toggled.liked)

    async def delete_quote(self, store: DocumentStore, quote_id: str) -> DeleteResult:
        oid = parse_object_id(quote_id, "quote")
        try:
            result = await store.quotes.delete_one({"_id": oid})
        except PyMongoError as e:
            logger.error("Store error deleting quote %s: %s", quote_id, str(e))
            raise DatabaseError(
                message="Error deleting quote",
                context={"reason": str(e), "quote_id": quote_id},
            )
        logger.info("Quote %s delete: deleted_count=%d", quote_id, result.deleted_count)
        return DeleteResult.from_result(result)


# ── Singleton Instance ────────────────────────────────────────────────────
quote_service = QuoteService()
