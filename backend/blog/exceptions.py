"""
Blog Backend - Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions for the error scenarios of the blog API.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the right status code.
Who:   Raised by services, stores and the file service; caught by handlers.

Exception Hierarchy:
    BlogError (base)            → 500 Internal Server Error
    ├── ValidationError         → 400 Bad Request (client can fix)
    ├── NotFoundError           → 404 Not Found
    ├── DatabaseError           → 500 Internal Server Error (not retried)
    └── FileStorageError        → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class BlogError(Exception):
    """
    Base exception for all blog application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, only returned for client errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BlogError):
    """
    Raised when client input breaks a business rule.

    Schema-level problems (missing fields, wrong types) are rejected earlier by
    FastAPI with 422; this covers rules pydantic cannot see, such as a body id
    that disagrees with the path id or an unsupported image type.
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


class NotFoundError(BlogError):
    """
    Raised when a referenced post, comment or image does not exist.

    Stores return None for missing rows; services convert that None into
    this exception so the route layer stays free of status-code logic.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class DatabaseError(BlogError):
    """
    Raised when a database operation fails (connection lost, constraint
    violation, deadlock). Never retried; surfaces as a 500.

    The message returned to the client is always generic. The SQLAlchemy
    error type is kept in the context and logged server side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(BlogError):
    """Raised when an uploaded image cannot be written to the storage volume."""

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
