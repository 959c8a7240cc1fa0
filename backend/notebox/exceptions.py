"""
Notebox Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for each failure class of the service.
How:   Each exception carries a user-facing message and an optional context
       dict. Handlers registered in main.py translate them into JSON error
       responses with the matching HTTP status code.
Who:   Raised by services and the authorization gate; caught by global handlers.

Exception Hierarchy:
    NoteboxError (base)
    ├── ValidationError          → 400 Bad Request
    ├── UnauthorizedError        → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class NoteboxError(Exception):
    """
    Base exception for all Notebox application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to the client
                  unless the handler chooses to)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteboxError):
    """
    Raised when client input fails a business rule.

    When:    Username/password too short, empty note title or content.
    HTTP:    400 Bad Request
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


class UnauthorizedError(NoteboxError):
    """
    Raised when a request cannot be tied to a user.

    When:    Missing/invalid bearer token, expired token, bad credentials.
    HTTP:    401 Unauthorized

    Unknown usernames and wrong passwords share one message so the
    response does not reveal which usernames exist.
    """

    def __init__(
        self,
        message: str = "Invalid token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NoteboxError):
    """
    Raised when a requested resource does not exist for the caller.

    HTTP:    404 Not Found

    Owner-scoped lookups raise this both for missing rows and for rows owned
    by somebody else; the two cases are indistinguishable to the client.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(NoteboxError):
    """
    Raised when a write collides with an existing unique value.

    When:    Registering a username that is already taken.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(NoteboxError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, unexpected constraint violation, etc.
    HTTP:    500 Internal Server Error

    The context dict (exception type, ids) is logged server-side only; the
    message returned to the client stays generic.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

