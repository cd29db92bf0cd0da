"""
AmarGolpo Backend — Book Request/Response Schemas
===================================================

What:  API contracts for the book endpoints that are not plain documents.

PUT /books/{id} accepts two body shapes:
    {"ratingUpdate": {"userId": "u1", "rating": 4}}   → BookRatingResponse
    {"title": "New title", ...}                        → BookUpdateResponse

Anything other than a ratingUpdate is applied as a partial $set, so the plain
form has no schema beyond "a JSON object".
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from amargolpo.schemas.common import UpdateResult


class RatingUpdate(BaseModel):
    """
    The `ratingUpdate` member of a PUT /books/{id} body.

    Both fields are optional at the schema level so that a missing value is
    reported as a 400 by the book service, like the other presence checks.
    The rating is not range-checked, but it must be a finite number.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    rating: Optional[float] = Field(default=None, allow_inf_nan=False)


class BookRatingResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Rating updated"
    avg_rating: Optional[float] = Field(
        alias="avgRating",
        description="New mean rating; null when no ratings exist under the unset policy",
    )


class BookUpdateResponse(BaseModel):
    message: str = "Book updated"
    result: Optional[UpdateResult] = None
