"""
AmarGolpo Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) turn them into
       structured JSON error responses with the matching HTTP status code.
Who:   Raised by services and the document store; caught by global handlers.

Exception Hierarchy:
    AmarGolpoError (base)
    ├── ValidationError          → 400 Bad Request (missing field, malformed id)
    ├── NotFoundError            → 404 Not Found
    └── DatabaseError            → 500 Internal Server Error
        └── StoreConnectionError → 500 (store unreachable / not connected)
"""

from typing import Any, Dict, Optional


class AmarGolpoError(Exception):
    """
    Base exception for all AmarGolpo application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(AmarGolpoError):
    """
    Raised when client input fails a presence or format check.

    When:    POST /quotes without text/author/category, a like request without
             userId, an incomplete ratingUpdate, or a malformed identifier.
    HTTP:    400 Bad Request

    Schema-level type errors are still answered by FastAPI with 422; this
    exception covers the business rules the handlers enforce themselves.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(AmarGolpoError):
    """
    Raised when an id-addressed update targets a document that does not exist.

    HTTP:    404 Not Found

    GET /books/{id} does not raise this; a missing book is answered with {}.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(AmarGolpoError):
    """
    Raised when a document store operation fails.

    HTTP:    500 Internal Server Error

    The driver's error text is kept in context["reason"] and returned to the
    client in `details`, matching what the web frontend displays.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreConnectionError(DatabaseError):
    """
    Raised when the document store cannot be reached or was never connected.

    At startup this is fatal: the lifespan handler re-raises it and the
    server refuses to start. During requests it is answered like any other
    DatabaseError; /health reports it in its own response body.
    """

    def __init__(
        self,
        message: str = "Document store is not connected",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
