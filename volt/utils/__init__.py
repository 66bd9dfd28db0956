"""
Utility modules for the Volt application.
"""

from .exceptions import (
    ErrorKind,
    VoltError,
    ValidationError,
    AuthError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    UnprocessableEntityError,
    InternalError,
    DecryptionError,
)

__all__ = [
    "ErrorKind",
    "VoltError",
    "ValidationError",
    "AuthError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "UnprocessableEntityError",
    "InternalError",
    "DecryptionError",
]
