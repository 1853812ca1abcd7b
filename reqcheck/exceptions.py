"""
ReqCheck — Custom Exception Hierarchy
=====================================

What:  Application-specific exceptions for the error scenarios handlers,
       the movie store, and the client fetcher can hit.
How:   Each exception carries a message and optional context dict.
       The router and the FastAPI exception handlers catch these and
       turn them into responses with the matching status code.

Exception Hierarchy:
    ReqCheckError (base)
    ├── ValidationError   → 400 Bad Request (client can fix)
    ├── NotFoundError     → 404 Not Found
    ├── DatabaseError     → 500 Internal Server Error
    └── TransportError    → client side, the request never got a response
"""

from typing import Any, Dict, Optional


class ReqCheckError(Exception):
    """
    Base exception for all ReqCheck application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where noted)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ReqCheckError):
    """
    Raised when client input fails validation.

    When:    Body is not JSON, a field has the wrong type, a path parameter
             cannot be parsed.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Request body is not valid JSON",
            "details": {"field": "body"}
        }
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


class NotFoundError(ReqCheckError):
    """
    Raised when a requested resource does not exist.

    When:    GET /movies/{movie_id} with an id nobody created.
    HTTP:    404 Not Found
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


class DatabaseError(ReqCheckError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TransportError(ReqCheckError):
    """
    Raised by the client fetcher when no response arrived at all.

    When:    Connection refused, DNS failure, timeout imposed by the host.
    Raised once, never retried.
    """

    def __init__(
        self,
        message: str = "The request could not be sent",
        url: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if url:
            ctx["url"] = url
        super().__init__(message=message, context=ctx)
        self.url = url
