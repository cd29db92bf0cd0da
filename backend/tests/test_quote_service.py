"""
AmarGolpo Backend — Quote Service Unit Tests
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from amargolpo.exceptions import DatabaseError, NotFoundError, ValidationError
from amargolpo.schemas.quote import QuoteCreate
from amargolpo.services.quote_service import QuoteService


class TestQuoteServiceList:

    def setup_method(self):
        self.service = QuoteService()

    @pytest.mark.asyncio
    async def test_list_newest_first(self, mock_store, make_cursor):
        cursor = make_cursor([{
            "_id": ObjectId(), "text": "t", "author": "a", "category": "life",
            "likes": ["u1"], "createdAt": datetime(2025, 1, 1, tzinfo=timezone.utc),
        }])
        mock_store.quotes.find.return_value = cursor

        quotes = await self.service.list_quotes(mock_store)

        mock_store.quotes.find.assert_called_once_with({})
        cursor.sort.assert_called_once_with("createdAt", DESCENDING)
        assert quotes[0].likes == ["u1"]

    @pytest.mark.asyncio
    async def test_list_by_category(self, mock_store):
        await self.service.list_quotes(mock_store, category="love")
        mock_store.quotes.find.assert_called_once_with({"category": "love"})


class TestQuoteServiceCreate:

    def setup_method(self):
        self.service = QuoteService()

    @pytest.mark.asyncio
    async def test_create_initializes_likes_and_timestamp(self, mock_store):
        oid = ObjectId()
        mock_store.quotes.insert_one.return_value = MagicMock(acknowledged=True, inserted_id=oid)

        result = await self.service.create_quote(
            mock_store, QuoteCreate(text="t", author="a", category="c")
        )

        assert result.inserted_id == str(oid)
        document = mock_store.quotes.insert_one.await_args.args[0]
        assert document["likes"] == []
        assert document["createdAt"].tzinfo is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["text", "author", "category"])
    async def test_create_missing_field_rejected(self, mock_store, missing):
        fields = {"text": "t", "author": "a", "category": "c"}
        fields[missing] = ""

        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_quote(mock_store, QuoteCreate(**fields))

        assert exc_info.value.context["fields"] == [missing]
        mock_store.quotes.insert_one.assert_not_awaited()


class TestQuoteServiceLike:

    def setup_method(self):
        self.service = QuoteService()

    @pytest.mark.asyncio
    async def test_like_new_user_increments(self, mock_store):
        oid = ObjectId()
        mock_store.quotes.find_one.return_value = {"_id": oid, "likes": ["u1"]}

        result = await self.service.toggle_like(mock_store, str(oid), "u2")

        assert result.likes_count == 2
        assert result.liked is True
        mock_store.quotes.update_one.assert_awaited_once_with(
            {"_id": oid}, {"$set": {"likes": ["u1", "u2"]}}
        )

    @pytest.mark.asyncio
    async def test_unlike_existing_user(self, mock_store):
        oid = ObjectId()
        mock_store.quotes.find_one.return_value = {"_id": oid, "likes": ["u1", "u2"]}

        result = await self.service.toggle_like(mock_store, str(oid), "u1")

        assert result.likes_count == 1
        assert result.liked is False

    @pytest.mark.asyncio
    async def test_quote_not_found(self, mock_store):
        mock_store.quotes.find_one.return_value = None

        with pytest.raises(NotFoundError):
            await self.service.toggle_like(mock_store, str(ObjectId()), "u1")

    @pytest.mark.asyncio
    async def test_missing_user_id_rejected_when_required(self, mock_store):
        with pytest.raises(ValidationError):
            await self.service.toggle_like(mock_store, str(ObjectId()), None, require_user_id=True)
        mock_store.quotes.find_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_user_id_is_noop_when_optional(self, mock_store):
        oid = ObjectId()
        mock_store.quotes.find_one.return_value = {"_id": oid, "likes": ["u1", "u2"]}

        result = await self.service.toggle_like(mock_store, str(oid), None, require_user_id=False)

        assert result.likes_count == 2
        mock_store.quotes.update_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_failure_wrapped(self, mock_store):
        mock_store.quotes.find_one.side_effect = PyMongoError("timeout")

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.toggle_like(mock_store, str(ObjectId()), "u1")
        assert exc_info.value.context["reason"] == "timeout"


class TestQuoteServiceDelete:

    @pytest.mark.asyncio
    async def test_delete_malformed_id(self, mock_store):
        with pytest.raises(ValidationError):
            await QuoteService().delete_quote(mock_store, "123")
