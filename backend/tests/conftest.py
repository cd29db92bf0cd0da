"""
AmarGolpo Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The document store is replaced by MagicMock/AsyncMock collections, so
       no MongoDB server is needed. Endpoint tests talk to the FastAPI app
       through httpx's ASGITransport (lifespan does not run, so the store is
       never really connected).

Fixtures:
    test_settings   Settings with allow-list CORS and default policies
    make_cursor     Builds a find() cursor mock returning given documents
    mock_store      DocumentStore stand-in with mocked books/quotes collections
    test_client     httpx AsyncClient bound to create_app(test_settings, mock_store)
"""

import os

# Override settings BEFORE any application imports
os.environ["MONGODB_URI"] = "mongodb://localhost:27017"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from amargolpo.config import Settings
from amargolpo.database import DocumentStore


ALLOWED_ORIGIN = "http://localhost:5173"


def _cursor(docs):
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=list(docs))
    return cursor


def _collection():
    collection = MagicMock()
    collection.find = MagicMock(return_value=_cursor([]))
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.update_one = AsyncMock()
    collection.delete_one = AsyncMock()
    return collection


@pytest.fixture
def test_settings():
    return Settings(
        cors_mode="allow-list",
        cors_origins=f"{ALLOWED_ORIGIN},https://amargolpo.vercel.app",
        empty_rating_policy="unset",
        require_like_user_id=True,
        store_connect_attempts=1,
        log_level="WARNING",
    )


@pytest.fixture
def make_cursor():
    """
    Usage:
        mock_store.books.find.return_value = make_cursor([{"_id": oid}])
    """
    return _cursor


@pytest.fixture
def mock_store():
    """
    A DocumentStore stand-in whose collections are mocks.

    Usage:
        mock_store.books.find_one.return_value = {"_id": oid, "ratings": []}
        result = await book_service.get_book(mock_store, str(oid))
    """
    store = MagicMock(spec=DocumentStore)
    store.books = _collection()
    store.quotes = _collection()
    store.connect = AsyncMock()
    store.ping = AsyncMock()
    store.close = AsyncMock()
    return store


@pytest_asyncio.fixture
async def test_client(test_settings, mock_store):
    """
    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    from amargolpo.main import create_app

    app = create_app(settings=test_settings, store=mock_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
