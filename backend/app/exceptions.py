"""
PetHaven Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for every failure the API can report.
Why:   Services raise domain errors; global handlers in main.py turn them into
       structured JSON responses with the right HTTP status code.
How:   Each exception carries a user-facing message and a context dict that
       is logged server-side.

Exception Hierarchy:
    PetHavenError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    │   └── ConsistencyError     → 409 Conflict (atomic unit rolled back)
    ├── PersistenceError         → 500 Internal Server Error
    ├── FileStorageError         → 500 Internal Server Error
    └── ServiceUnavailableError  → 503 Service Unavailable (storage timed out)
"""

from typing import Any, Dict, Optional


class PetHavenError(Exception):
    """
    Base exception for all PetHaven application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only returned for client errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PetHavenError):
    """
    Raised when client input fails validation.

    When:    Missing required application fields, a status outside {1, 0, -1},
             a petId that does not match the application, bad upload type.
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


class AuthenticationError(PetHavenError):
    """Bad credentials or a missing/expired bearer token. HTTP 401."""

    def __init__(
        self,
        message: str = "Authentication failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PetHavenError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into
    NotFoundError so routes never deal with None checks.
    HTTP:    404 Not Found
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


class ConflictError(PetHavenError):
    """The request clashes with current state (duplicate user, reserved pet). HTTP 409."""

    def __init__(
        self,
        message: str = "The request conflicts with the current state of the resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConsistencyError(ConflictError):
    """
    Raised when an application status change and its pet status change
    cannot be committed together.

    Either the pet is already reserved by another approved application, or
    the combined write failed and was rolled back. In both cases neither the
    application nor the pet has changed.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "The status change could not be applied consistently and was rolled back",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PersistenceError(PetHavenError):
    """
    Raised when the database rejects a write or a query fails.

    Security Note:
        The client always gets a generic message. Constraint names, SQL and
        driver errors are logged server-side only.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(PetHavenError):
    """Could not write or read an uploaded file. HTTP 500."""

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ServiceUnavailableError(PetHavenError):
    """
    Raised when a storage call does not finish within the configured timeout.

    HTTP:    503 Service Unavailable, with a Retry-After hint.
    """

    def __init__(
        self,
        message: str = "The database did not respond in time. Please try again shortly.",
        retry_after: int = 5,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
