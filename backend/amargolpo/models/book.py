"""
AmarGolpo Backend — Book Document Model
=========================================

What:  Typed record for documents in the `books` collection.
How:   Pydantic model loaded straight from the MongoDB document. Stories are
       schema-free apart from the rating fields, so unknown fields are kept
       as extras and returned to the client unchanged.

Stored shape:
    {
        "_id": ObjectId("..."),
        "title": "...", "text": "...", ...          (free-form)
        "ratings": [{"userId": "u1", "rating": 4}], (one entry per user)
        "rating": "4.0"                             (mean, one decimal)
    }

Invariant:
    When `ratings` is non-empty, `rating` equals the mean of ratings[].rating
    formatted to one decimal place. When it is empty, `rating` is absent
    (or "0.0" under the zero empty-rating policy).
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from amargolpo.models.document import stringify_object_ids


class RatingEntry(BaseModel):
    """One user's rating of a book."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: Union[str, int] = Field(alias="userId")
    rating: float = Field(allow_inf_nan=False)


class Book(BaseModel):
    """
    A story. Only `_id`, `ratings` and `rating` are typed; everything else the
    author sent is preserved as an extra field.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(alias="_id")
    # Books are written by clients as-is, so ratings that do not parse are
    # kept and returned unchanged rather than rejected on read.
    ratings: Union[List[RatingEntry], Any] = Field(default=None, union_mode="left_to_right")
    rating: Any = None

    @model_validator(mode="before")
    @classmethod
    def convert_bson(cls, data: Any) -> Any:
        return stringify_object_ids(data)

    @field_validator("rating", mode="before")
    @classmethod
    def coerce_rating(cls, v: Any) -> Any:
        # Older documents stored the mean as a number.
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    def to_response(self) -> dict:
        """Serialize with Mongo field names, omitting rating fields the document lacks."""
        data = self.model_dump(by_alias=True, mode="json")
        for name in ("ratings", "rating"):
            if name not in self.model_fields_set:
                data.pop(name, None)
        return data
