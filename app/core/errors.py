"""Typed error taxonomy shared by services and the HTTP layer.

Every application error carries an ErrorKind; the HTTP layer maps the kind to a
status code and never inspects message text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Error category with its HTTP status."""

    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self]


_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class AppError(Exception):
    """Base class for errors that cross service boundaries."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class ValidationError(AppError):
    """Malformed or missing input."""

    kind = ErrorKind.VALIDATION


class AuthenticationError(AppError):
    """Missing, invalid or expired credential."""

    kind = ErrorKind.AUTHENTICATION


class TokenError(AuthenticationError):
    """A bearer token could not be accepted."""


class TokenExpiredError(TokenError):
    """Token signature is valid but its expiry has passed."""


class TokenInvalidError(TokenError):
    """Token is malformed, has a bad signature, or carries unusable claims."""


class ForbiddenError(AppError):
    """Authenticated but not allowed (banned account, missing role)."""

    kind = ErrorKind.FORBIDDEN


class NotFoundError(AppError):
    """Requested entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(AppError):
    """Entity already exists (duplicate username)."""

    kind = ErrorKind.CONFLICT


class StoreError(AppError):
    """Database or transaction failure."""

    kind = ErrorKind.INTERNAL


class HashingError(AppError):
    """Password hashing backend failed."""

    kind = ErrorKind.INTERNAL
