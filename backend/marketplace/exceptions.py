"""
GoEveryWork Marketplace — Exception Hierarchy
===============================================

What:  Application-specific exceptions, each mapped to an HTTP status by the
       global handlers registered in main.py.
Who:   Raised by services and dependencies; caught by the global handlers.

Exception Hierarchy:
    MarketplaceError (base)
    ├── ValidationError        → 400 Bad Request
    ├── AuthenticationError    → 401 Unauthorized
    ├── PermissionDeniedError  → 403 Forbidden
    ├── NotFoundError          → 404 Not Found
    └── DatabaseError          → 500 Internal Server Error

The slug codec never raises. A slug that cannot be resolved surfaces here as
a NotFoundError raised by the listing lookup.
"""

from typing import Any, Dict, Optional


class MarketplaceError(Exception):
    """
    Base exception for all marketplace errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where the handler says so)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MarketplaceError):
    """
    Raised when input breaks a business rule that schema validation cannot express.

    Schema-level problems (wrong types, out-of-range rating) are rejected by
    FastAPI with 422 before reaching the services.
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


class AuthenticationError(MarketplaceError):
    """Raised when a mutating endpoint is called without an authenticated user."""

    def __init__(
        self,
        message: str = "Authentication is required for this operation",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(MarketplaceError):
    """Raised when a user tries to modify a listing they do not own."""

    def __init__(
        self,
        message: str = "You do not have permission to modify this resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MarketplaceError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into this
    exception so routes never deal with None checks.
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


class DatabaseError(MarketplaceError):
    """
    Raised when a database operation fails unexpectedly.

    The client always gets a generic message; details stay in server logs.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
