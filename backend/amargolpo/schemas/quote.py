"""
AmarGolpo Backend — Quote Request/Response Schemas
====================================================

What:  API contracts for creating quotes and toggling likes.

Required-field checks (text, author, category, userId) are performed by
QuoteService rather than by pydantic so that a missing field yields the
API's 400 validation_error body instead of FastAPI's 422.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class QuoteCreate(BaseModel):
    text: Optional[str] = None
    author: Optional[str] = None
    category: Optional[str] = None


class LikeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")


class LikesCountResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    likes_count: int = Field(alias="likesCount", description="Number of users liking the quote")
    liked: bool = Field(description="Whether the requesting user likes the quote after the toggle")
