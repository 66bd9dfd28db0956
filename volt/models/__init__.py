"""
Database models for the Volt application.
"""

from .user import User
from .credential import AddressCredential, PasswordCredential, PaymentCredential, Secret
from .recovery_token import RecoveryToken
from .revoked_token import RevokedToken

__all__ = [
    "User",
    "AddressCredential",
    "PasswordCredential",
    "PaymentCredential",
    "Secret",
    "RecoveryToken",
    "RevokedToken",
]
