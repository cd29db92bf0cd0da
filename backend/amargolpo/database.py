"""
AmarGolpo Backend — Document Store Connection Management
==========================================================

What:  The MongoDB client, the `books` and `quotes` collection handles, and
       the FastAPI dependency that hands them to route handlers.
How:   DocumentStore is constructed explicitly in create_app(), opened in the
       lifespan startup, stored on app.state, and closed on shutdown.
Who:   Route handlers receive it via Depends(get_store); services receive it
       as an argument.

Connection Lifecycle:
    create_app()  → DocumentStore(settings)          (no I/O yet)
    lifespan      → await store.connect()            (client + ping + collections)
    requests      → store.books / store.quotes       (shared handles)
    /health       → await store.connect(); ping      (lazy reconnect)
    shutdown      → await store.close()

    connect() is idempotent: concurrent or repeated calls share one client
    and bind the collections once.

Concurrency:
    One AsyncMongoClient per process, shared by every request. The driver
    pools connections internally. Individual update_one calls are atomic per
    document; read-modify-write sequences built on top of them are not.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from bson import ObjectId
from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from amargolpo.config import Settings, settings as default_settings
from amargolpo.exceptions import StoreConnectionError, ValidationError

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    Owns the MongoDB client and the two collection handles.

    Args:
        settings:        Connection and retry configuration.
        client_factory:  Callable building the client from (uri, **kwargs).
                         Defaults to pymongo's AsyncMongoClient; tests pass a
                         mock factory instead.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: Callable[..., Any] = AsyncMongoClient,
    ):
        self._settings = settings or default_settings
        self._client_factory = client_factory
        self._client: Any = None
        self._books: Any = None
        self._quotes: Any = None
        self._lock = asyncio.Lock()

    # ── Collection Handles ────────────────────────────────────────────────

    @property
    def is_connected(self) -> bool:
        return self._books is not None and self._quotes is not None

    @property
    def books(self) -> Any:
        if self._books is None:
            raise StoreConnectionError(context={"collection": self._settings.books_collection})
        return self._books

    @property
    def quotes(self) -> Any:
        if self._quotes is None:
            raise StoreConnectionError(context={"collection": self._settings.quotes_collection})
        return self._quotes

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def connect(self) -> None:
        """
        Establish the client and bind the collections, at most once.

        Retries the connect+ping sequence with exponential backoff and jitter
        (store_connect_attempts). When every attempt fails, raises
        StoreConnectionError with the driver's message as the reason.

        Raises:
            StoreConnectionError: The store could not be reached.
        """
        if self.is_connected:
            return

        async with self._lock:
            if self.is_connected:
                return

            retrying = AsyncRetrying(
                retry=retry_if_exception_type(PyMongoError),
                stop=stop_after_attempt(self._settings.store_connect_attempts),
                wait=wait_exponential_jitter(
                    initial=self._settings.store_retry_min_wait,
                    max=self._settings.store_retry_max_wait,
                    jitter=1,
                ),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            )
            try:
                async for attempt in retrying:
                    with attempt:
                        await self._open()
            except PyMongoError as e:
                logger.error("MongoDB connection failed: %s", str(e))
                raise StoreConnectionError(
                    message="Could not connect to the document store",
                    context={
                        "reason": str(e),
                        "attempts": self._settings.store_connect_attempts,
                    },
                ) from e

            logger.info(
                "MongoDB connected: database=%s collections=[%s, %s]",
                self._settings.mongodb_db_name,
                self._settings.books_collection,
                self._settings.quotes_collection,
            )

    async def _open(self) -> None:
        if self._client is None:
            self._client = self._client_factory(
                self._settings.mongodb_uri,
                server_api=ServerApi("1"),
                serverSelectionTimeoutMS=self._settings.store_server_selection_timeout_ms,
                tz_aware=True,
            )
        await self._client.admin.command("ping")

        db = self._client[self._settings.mongodb_db_name]
        self._books = db[self._settings.books_collection]
        self._quotes = db[self._settings.quotes_collection]

    async def ping(self) -> None:
        """
        Lightweight liveness check against the admin database.

        Raises:
            StoreConnectionError: Not connected, or the ping failed.
        """
        if self._client is None:
            raise StoreConnectionError()
        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            raise StoreConnectionError(
                message="Document store did not answer the ping",
                context={"reason": str(e)},
            ) from e

    async def close(self) -> None:
        """Close the client. Safe to call when connect() never ran."""
        if self._client is None:
            return
        await self._client.close()
        self._client = None
        self._books = None
        self._quotes = None
        logger.info("MongoDB connection closed")


# ── Request Dependency ────────────────────────────────────────────────────
def get_store(request: Request) -> DocumentStore:
    """FastAPI dependency returning the store attached by create_app()."""
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    """FastAPI dependency returning the Settings the app was built with."""
    return request.app.state.settings


# ── Identifier Helpers ────────────────────────────────────────────────────
def parse_object_id(value: str, resource: str = "document") -> ObjectId:
    """
    Convert a path segment into an ObjectId.

    Raises:
        ValidationError: The value is not a 24-character hex ObjectId.
    """
    if not ObjectId.is_valid(value):
        raise ValidationError(
            message=f"'{value}' is not a valid {resource} id",
            field="id",
        )
    return ObjectId(value)
