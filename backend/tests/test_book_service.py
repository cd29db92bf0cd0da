"""
AmarGolpo Backend — Book Service Unit Tests
=============================================

What:  BookService against mocked collections (no MongoDB).

What we test:
    ✅ Reads: list, get, missing id → None, malformed id → ValidationError
    ✅ Rating path: persisted ratings/rating, response avgRating, 404, 400s
    ✅ Plain updates: protected fields stripped, 404 on no match
    ✅ Driver errors wrapped in DatabaseError with the reason
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from amargolpo.exceptions import DatabaseError, NotFoundError, ValidationError
from amargolpo.schemas.book import BookRatingResponse, BookUpdateResponse, RatingUpdate
from amargolpo.services.book_service import BookService


def update_result(matched=1, modified=1):
    return MagicMock(acknowledged=True, matched_count=matched, modified_count=modified, upserted_id=None)


class TestBookServiceRead:

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_list_books(self, mock_store, make_cursor):
        oid = ObjectId()
        mock_store.books.find.return_value = make_cursor([{"_id": oid, "title": "Golpo"}])

        books = await self.service.list_books(mock_store)

        assert len(books) == 1
        assert books[0].to_response() == {"_id": str(oid), "title": "Golpo"}

    @pytest.mark.asyncio
    async def test_get_book_missing_returns_none(self, mock_store):
        mock_store.books.find_one.return_value = None
        assert await self.service.get_book(mock_store, str(ObjectId())) is None

    @pytest.mark.asyncio
    async def test_get_book_malformed_id(self, mock_store):
        with pytest.raises(ValidationError):
            await self.service.get_book(mock_store, "not-an-id")
        mock_store.books.find_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_book_store_failure(self, mock_store):
        mock_store.books.find_one.side_effect = PyMongoError("connection reset")

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.get_book(mock_store, str(ObjectId()))
        assert exc_info.value.context["reason"] == "connection reset"


class TestBookServiceWrite:

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_create_book_drops_client_id(self, mock_store):
        oid = ObjectId()
        mock_store.books.insert_one.return_value = MagicMock(acknowledged=True, inserted_id=oid)

        result = await self.service.create_book(mock_store, {"_id": "mine", "title": "T"})

        mock_store.books.insert_one.assert_awaited_once_with({"title": "T"})
        assert result.inserted_id == str(oid)

    @pytest.mark.asyncio
    async def test_delete_missing_reports_zero(self, mock_store):
        mock_store.books.delete_one.return_value = MagicMock(acknowledged=True, deleted_count=0)

        result = await self.service.delete_book(mock_store, str(ObjectId()))

        assert result.deleted_count == 0

    @pytest.mark.asyncio
    async def test_plain_update(self, mock_store):
        oid = ObjectId()
        mock_store.books.update_one.return_value = update_result()

        result = await self.service.update_book(
            mock_store, str(oid), {"title": "New", "_id": "x", "rating": "5.0"}
        )

        assert isinstance(result, BookUpdateResponse)
        assert result.result.matched_count == 1
        mock_store.books.update_one.assert_awaited_once_with({"_id": oid}, {"$set": {"title": "New"}})

    @pytest.mark.asyncio
    async def test_plain_update_not_found(self, mock_store):
        mock_store.books.update_one.return_value = update_result(matched=0, modified=0)

        with pytest.raises(NotFoundError):
            await self.service.update_book(mock_store, str(ObjectId()), {"title": "New"})

    @pytest.mark.asyncio
    async def test_plain_update_without_fields(self, mock_store):
        with pytest.raises(ValidationError):
            await self.service.update_book(mock_store, str(ObjectId()), {"_id": "x"})


class TestBookServiceRating:

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_rating_overwrites_and_persists(self, mock_store):
        oid = ObjectId()
        mock_store.books.find_one.return_value = {
            "_id": oid,
            "ratings": [{"userId": "u1", "rating": 4}, {"userId": "u2", "rating": 2}],
        }

        result = await self.service.update_book(
            mock_store, str(oid), {"ratingUpdate": {"userId": "u1", "rating": 5}}
        )

        assert isinstance(result, BookRatingResponse)
        assert result.avg_rating == pytest.approx(3.5)
        mock_store.books.update_one.assert_awaited_once_with(
            {"_id": oid},
            {"$set": {
                "ratings": [{"userId": "u1", "rating": 5.0}, {"userId": "u2", "rating": 2.0}],
                "rating": "3.5",
            }},
        )

    @pytest.mark.asyncio
    async def test_first_rating_on_book_without_ratings(self, mock_store):
        oid = ObjectId()
        mock_store.books.find_one.return_value = {"_id": oid}

        result = await self.service.rate_book(
            mock_store, str(oid), RatingUpdate(user_id="u1", rating=4)
        )

        assert result.avg_rating == 4.0

    @pytest.mark.asyncio
    async def test_rating_book_not_found(self, mock_store):
        mock_store.books.find_one.return_value = None

        with pytest.raises(NotFoundError):
            await self.service.update_book(
                mock_store, str(ObjectId()), {"ratingUpdate": {"userId": "u1", "rating": 3}}
            )
        mock_store.books.update_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rating_requires_user_id(self, mock_store):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.update_book(
                mock_store, str(ObjectId()), {"ratingUpdate": {"rating": 3}}
            )
        assert exc_info.value.field == "userId"

    @pytest.mark.asyncio
    async def test_rating_requires_numeric_rating(self, mock_store):
        with pytest.raises(ValidationError):
            await self.service.update_book(
                mock_store, str(ObjectId()), {"ratingUpdate": {"userId": "u1", "rating": "great"}}
            )

    @pytest.mark.asyncio
    async def test_rating_update_failure_wrapped(self, mock_store):
        oid = ObjectId()
        mock_store.books.find_one.return_value = {"_id": oid, "ratings": []}
        mock_store.books.update_one.side_effect = PyMongoError("write failed")

        with pytest.raises(DatabaseError):
            await self.service.rate_book(mock_store, str(oid), RatingUpdate(user_id="u1", rating=1))

    @pytest.mark.asyncio
    async def test_rating_rejects_non_finite_value(self, mock_store):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.update_book(
                mock_store, str(ObjectId()), {"ratingUpdate": {"userId": "u1", "rating": float("inf")}}
            )
        assert exc_info.value.field == "ratingUpdate"
        mock_store.books.find_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rating_with_numeric_user_ids_in_store(self, mock_store):
        oid = ObjectId()
        mock_store.books.find_one.return_value = {
            "_id": oid, "ratings": [{"userId": 42, "rating": 4}],
        }

        result = await self.service.rate_book(mock_store, str(oid), RatingUpdate(user_id="42", rating=2))

        assert result.avg_rating == 3.0
        stored = mock_store.books.update_one.call_args.args[1]["$set"]["ratings"]
        assert stored == [{"userId": 42, "rating": 4.0}, {"userId": "42", "rating": 2.0}]

    @pytest.mark.asyncio
    async def test_rating_over_malformed_stored_ratings(self, mock_store):
        oid = ObjectId()
        mock_store.books.find_one.return_value = {"_id": oid, "ratings": "none yet"}

        with pytest.raises(ValidationError) as exc_info:
            await self.service.rate_book(mock_store, str(oid), RatingUpdate(user_id="u1", rating=4))
        assert exc_info.value.field == "ratings"
        mock_store.books.update_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_book_passes_empty_policy(self, mock_store):
        oid = ObjectId()
        mock_store.books.find_one.return_value = {"_id": oid}

        with patch.object(self.service, "rate_book", new=AsyncMock()) as rate_book:
            await self.service.update_book(
                mock_store, str(oid), {"ratingUpdate": {"userId": "u1", "rating": 4}},
                empty_policy="zero",
            )
        assert rate_book.await_args.args[3] == "zero"
