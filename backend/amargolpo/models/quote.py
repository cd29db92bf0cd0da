"""
AmarGolpo Backend — Quote Document Model
==========================================

What:  Typed record for documents in the `quotes` collection.

Stored shape:
    {
        "_id": ObjectId("..."),
        "text": "...", "author": "...", "category": "...",
        "likes": ["u1", "u2"],          (unique user ids)
        "createdAt": ISODate("...")     (server-assigned, immutable)
    }
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from amargolpo.models.document import stringify_object_ids


class Quote(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    text: str
    author: str
    category: str
    likes: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @model_validator(mode="before")
    @classmethod
    def convert_bson(cls, data: Any) -> Any:
        return stringify_object_ids(data)
