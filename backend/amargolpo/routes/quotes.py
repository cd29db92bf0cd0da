"""
AmarGolpo Backend — Quote Route Handlers
==========================================

Endpoints:
    GET    /quotes              all quotes newest first (?category= filter)
    POST   /quotes              create; text, author and category required
    PUT    /quotes/{id}/like    toggle the caller's like, returns likesCount
    DELETE /quotes/{id}         delete by id
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query

from amargolpo.config import Settings
from amargolpo.database import DocumentStore, get_settings, get_store
from amargolpo.models.quote import Quote
from amargolpo.schemas.common import DeleteResult, ErrorResponse, InsertResult
from amargolpo.schemas.quote import LikeRequest, LikesCountResponse, QuoteCreate
from amargolpo.services.quote_service import quote_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotes", tags=["Quotes"])

_STORE_ERROR = {500: {"description": "Document store failure", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[Quote],
    responses=_STORE_ERROR,
    summary="List quotes, newest first",
)
async def list_quotes(
    category: Optional[str] = Query(default=None, description="Only quotes in this category"),
    store: DocumentStore = Depends(get_store),
) -> List[Quote]:
    return await quote_service.list_quotes(store, category=category)


@router.post(
    "",
    status_code=201,
    response_model=InsertResult,
    responses={
        400: {"description": "text, author or category missing", "model": ErrorResponse},
        **_STORE_ERROR,
    },
    summary="Add a quote",
)
async def create_quote(
    payload: QuoteCreate,
    store: DocumentStore = Depends(get_store),
) -> InsertResult:
    return await quote_service.create_quote(store, payload)


@router.put(
    "/{quote_id}/like",
    response_model=LikesCountResponse,
    responses={
        400: {"description": "Missing userId or malformed quote id", "model": ErrorResponse},
        404: {"description": "Quote not found", "model": ErrorResponse},
        **_STORE_ERROR,
    },
    summary="Like or unlike a quote",
)
async def toggle_like(
    quote_id: str,
    payload: Optional[LikeRequest] = Body(default=None),
    store: DocumentStore = Depends(get_store),
    config: Settings = Depends(get_settings),
) -> LikesCountResponse:
    user_id = payload.user_id if payload else None
    return await quote_service.toggle_like(
        store, quote_id, user_id, require_user_id=config.require_like_user_id
    )


@router.delete(
    "/{quote_id}",
    response_model=DeleteResult,
    responses={
        400: {"description": "Malformed quote id", "model": ErrorResponse},
        **_STORE_ERROR,
    },
    summary="Delete a quote",
)
async def delete_quote(quote_id: str, store: DocumentStore = Depends(get_store)) -> DeleteResult:
    return await quote_service.delete_quote(store, quote_id)
