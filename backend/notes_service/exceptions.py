"""
Notes Service — Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions for the server side.
How:   Each exception carries a message, an HTTP status code and an optional
       context dict. The error normalizer (error_handlers.py) turns them into
       the `{success, message, errors?}` envelope.
Who:   Raised by the service layer; caught only at the FastAPI boundary.

Exception Hierarchy:
    NotesServiceError (base)     → status_code attribute, default 500
    ├── ValidationError          → 422 Unprocessable Entity, field → messages map
    ├── NotFoundError            → 404 Not Found
    └── DatabaseError            → 500 Internal Server Error

Client-side failures (network, timeout, classified API errors) live in
notes_service.client.errors.
"""

from typing import Any, Dict, List, Optional


class NotesServiceError(Exception):
    """
    Base exception for all Notes Service application errors.

    Attributes:
        message:      User-facing error description
        status_code:  HTTP status the normalizer responds with
        context:      Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotesServiceError):
    """
    Raised when note input fails validation.

    What:    The client sent data it can correct (missing title, empty content...).
    HTTP:    422 Unprocessable Entity

    Example response:
        {
            "success": false,
            "message": "Validation failed",
            "errors": {"title": ["The title field is required."]}
        }
    """

    status_code = 422

    def __init__(
        self,
        errors: Dict[str, List[str]],
        message: str = "Validation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.errors = errors


class NotFoundError(NotesServiceError):
    """
    Raised when a requested note does not exist.

    SQLAlchemy returns None for missing rows; the service converts that None
    into this exception so the route never has to check.
    """

    status_code = 404

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
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(NotesServiceError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        Details (SQL, constraint names) are kept in `context` and logged
        server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, status_code=500, context=context)
