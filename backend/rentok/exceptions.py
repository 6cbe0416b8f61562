"""
RentOK Admin Backend — Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) translate them
       into JSON error responses with the matching HTTP status code.
Who:   Raised by services and route handlers; caught by global handlers.

Exception Hierarchy:
    RentokError (base)
    ├── ValidationError        → 400 Bad Request
    ├── AuthenticationError    → 401 Unauthorized
    ├── PermissionDeniedError  → 403 Forbidden
    ├── NotFoundError          → 404 Not Found
    ├── ConflictError          → 409 Conflict
    ├── DatabaseError          → 500 Internal Server Error (generic message)
    ├── ExternalServiceError   → 500 Internal Server Error (with details)
    └── ConfigurationError     → 500 Internal Server Error

Note: the Access Gate never raises any of these. Every failure while reading
the session cookie degrades to "no identity".
"""

from typing import Any, Dict, Optional


class RentokError(Exception):
    """
    Base exception for all RentOK application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where the
                  handler for the subclass says so)
    """

    status_code = 500
    code = "server_error"

    def __init__(
        self,
        message: str = "Internal server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RentokError):
    """
    Raised when client input fails a business rule.

    When:    Missing required field, out-of-range discount, bad color format.
    HTTP:    400 Bad Request

    Example response:
        {"error": "discount_value must be greater than 0", "code": "validation_error",
         "details": {"field": "discount_value"}}
    """

    status_code = 400
    code = "validation_error"

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


class AuthenticationError(RentokError):
    """Raised when login credentials do not match a known account. HTTP 401."""

    status_code = 401
    code = "authentication_failed"

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message=message)


class PermissionDeniedError(RentokError):
    """Raised when an authenticated account is not allowed to proceed. HTTP 403."""

    status_code = 403
    code = "permission_denied"

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message=message)


class NotFoundError(RentokError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None into
    this exception so route handlers stay free of status-code logic.
    HTTP: 404 Not Found
    """

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(RentokError):
    """
    Raised when a write would violate a uniqueness or reference rule.

    When:    Duplicate coupon code, duplicate tag name or slug, deleting a tag
             that products still reference.
    HTTP:    409 Conflict

    `payload` is merged into the response body (e.g. the products that still
    use a tag).
    """

    status_code = 409
    code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        payload: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.payload = payload or {}


class DatabaseError(RentokError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic. Driver details
    (SQL, constraint names) are logged server-side only.
    HTTP: 500 Internal Server Error
    """

    status_code = 500
    code = "database_error"

    def __init__(
        self,
        message: str = "Internal server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ExternalServiceError(RentokError):
    """
    Raised when the email provider or the image host rejects a call.

    HTTP: 500 Internal Server Error. The response carries `details` with the
    provider's error text so operators can diagnose from the client side.
    """

    status_code = 500
    code = "external_service_error"

    def __init__(
        self,
        message: str = "External service call failed",
        service: Optional[str] = None,
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if service:
            ctx["service"] = service
        super().__init__(message=message, context=ctx)
        self.service = service
        self.detail = detail


class ConfigurationError(RentokError):
    """Raised when a required secret is missing at request time. HTTP 500."""

    status_code = 500
    code = "configuration_error"

    def __init__(
        self,
        message: str = "Server is not configured for this operation",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
