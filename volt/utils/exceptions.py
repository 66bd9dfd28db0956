"""
Error taxonomy for the Volt application.

Every domain error carries an ``ErrorKind`` which fixes its HTTP status, so
handlers never need to walk a class hierarchy to pick a response code.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Error kinds and the HTTP status each one maps to."""

    VALIDATION = "validation"
    AUTH = "auth"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNPROCESSABLE = "unprocessable"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTH: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.UNPROCESSABLE: 422,
    ErrorKind.INTERNAL: 500,
}


class VoltError(Exception):
    """Base exception for all Volt errors."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, kind: Optional[ErrorKind] = None):
        self.message = message or self.default_message
        if kind is not None:
            self.kind = kind
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code


class ValidationError(VoltError):
    """Raised when input is malformed or missing."""

    kind = ErrorKind.VALIDATION
    default_message = "Bad request"


class AuthError(VoltError):
    """Raised when a token is missing, invalid or expired."""

    kind = ErrorKind.AUTH
    default_message = "Unauthorized"

    REASONS = ("expired", "invalid", "malformed")

    def __init__(self, message: Optional[str] = None, reason: str = "invalid"):
        if reason not in self.REASONS:
            raise ValueError(f"Unknown auth error reason: {reason}")
        super().__init__(message)
        self.reason = reason


class ForbiddenError(VoltError):
    """Raised when the caller is authenticated but does not own the resource."""

    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(VoltError):
    """Raised when a resource, user or token does not exist."""

    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class ConflictError(VoltError):
    """Raised on duplicates, consumed tokens and lost update races."""

    kind = ErrorKind.CONFLICT
    default_message = "Conflict"


class UnprocessableEntityError(VoltError):
    kind = ErrorKind.UNPROCESSABLE
    default_message = "Unprocessable entity"


class InternalError(VoltError):
    """Raised when an upstream collaborator (database, email) fails."""

    kind = ErrorKind.INTERNAL
    default_message = "Internal server error"


class DecryptionError(InternalError):
    """Raised when a ciphertext cannot be decrypted with the supplied key.

    Decryption failures are permanent: a key mismatch never self-corrects,
    so callers must not retry.
    """

    default_message = "Could not decrypt value"
