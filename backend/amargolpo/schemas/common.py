"""
AmarGolpo Backend — Shared Response Schemas
=============================================

What:  Pydantic models for responses shared by the books and quotes routes:
       store write results, errors, and the health check.
How:   Write results mirror the driver's result objects using the camelCase
       field names the web frontend already reads (insertedId, deletedCount).
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class InsertResult(BaseModel):
    """Returned by POST /books and POST /quotes."""

    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = Field(description="Whether the store acknowledged the write")
    inserted_id: str = Field(alias="insertedId", description="Store-assigned id of the new document")

    @classmethod
    def from_result(cls, result: Any) -> "InsertResult":
        return cls(acknowledged=result.acknowledged, inserted_id=str(result.inserted_id))


class UpdateResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool
    matched_count: int = Field(alias="matchedCount")
    modified_count: int = Field(alias="modifiedCount")
    upserted_id: Optional[str] = Field(default=None, alias="upsertedId")

    @classmethod
    def from_result(cls, result: Any) -> "UpdateResult":
        upserted = result.upserted_id
        return cls(
            acknowledged=result.acknowledged,
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_id=str(upserted) if upserted is not None else None,
        )


class DeleteResult(BaseModel):
    """
    Returned by DELETE /books/{id} and DELETE /quotes/{id}.

    Deleting an id that does not exist is not an error: deletedCount is 0.
    """

    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool
    deleted_count: int = Field(alias="deletedCount")

    @classmethod
    def from_result(cls, result: Any) -> "DeleteResult":
        return cls(acknowledged=result.acknowledged, deleted_count=result.deleted_count)


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Missing required fields: author",
            "details": {"fields": ["author"]},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health. `error` is only set when ok is false."""
    ok: bool = Field(description="True when the document store answered a ping")
    message: str
    version: str
    uptime_seconds: float
    error: Optional[str] = None
