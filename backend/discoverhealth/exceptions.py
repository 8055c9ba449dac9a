"""
DiscoverHealth Backend — Custom Exception Hierarchy
====================================================

What:  Application-specific exceptions for each failure class of the API.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers registered in main.py turn them into JSON error
       responses with the matching HTTP status code.
Who:   Raised by services, route dependencies and middleware.

Exception Hierarchy:
    DiscoverHealthError (base)
    ├── ValidationError          → 400 Bad Request
    ├── ConflictError            → 400 Bad Request (duplicate username)
    ├── AuthenticationError      → 401 Unauthorized (bad credentials)
    ├── AuthorizationError       → 401 Unauthorized (no / expired session)
    ├── NotFoundError            → 404 Not Found
    ├── StorageError             → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests

`context` is logged server-side and never returned for 5xx errors.
"""

from typing import Any, Dict, Optional


class DiscoverHealthError(Exception):
    """
    Base exception for all DiscoverHealth application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(DiscoverHealthError):
    """
    Raised when client input fails validation.

    When:    Missing field, bad character class, out-of-range coordinate,
             empty review, password too short.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Latitude must be between -90 and 90",
            "details": {"field": "lat"}
        }
    """

    status_code = 400
    error_code = "validation_error"

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


class ConflictError(DiscoverHealthError):
    """
    Raised when a write collides with an existing unique value.

    When:    Signup with a username that is already taken.
    HTTP:    400 Bad Request (the client has to pick another value)
    """

    status_code = 400
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Username already exists",
        field: Optional[str] = "username",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)


class AuthenticationError(DiscoverHealthError):
    """
    Raised when supplied credentials do not match a user.

    The message is identical for "unknown user" and "wrong password" so the
    response cannot be used to enumerate usernames.
    HTTP:    401 Unauthorized
    """

    status_code = 401
    error_code = "authentication_failed"

    def __init__(
        self,
        message: str = "Invalid username or password",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(DiscoverHealthError):
    """
    Raised by the login gate when the request carries no valid session.

    HTTP:    401 Unauthorized
    """

    status_code = 401
    error_code = "not_authenticated"

    def __init__(
        self,
        message: str = "You must be logged in to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(DiscoverHealthError):
    """
    Raised when a referenced resource does not exist.

    When:    Recommending or reviewing an unknown resource id.
    HTTP:    404 Not Found
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class StorageError(DiscoverHealthError):
    """
    Raised when the relational store fails unexpectedly.

    When:    Connection lost, locked database, constraint failure that is not
             a known business rule.
    HTTP:    500 Internal Server Error

    The client always receives a generic message; `context` (statement
    target, original exception type) goes to the server log only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(DiscoverHealthError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
