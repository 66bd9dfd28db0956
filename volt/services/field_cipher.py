"""
Field-level cipher for sensitive credential attributes.
"""

import base64
import hashlib
import secrets

from cryptography.fernet import Fernet, InvalidToken

from volt.utils.exceptions import DecryptionError, ValidationError


def generate_secret_key() -> str:
    """Generate a new per-user secret key (32 random bytes, hex encoded)."""
    return secrets.token_hex(32)


class FieldCipher:
    """Encrypts and decrypts single string values under a caller-supplied key.

    Ciphertexts are Fernet tokens, so every call embeds a fresh IV and a
    timestamp; encrypting the same plaintext twice never yields the same
    ciphertext. Fernet tokens are authenticated, so a wrong key is detected
    instead of producing garbage.
    """

    def _fernet(self, key: str) -> Fernet:
        if not key:
            raise ValidationError("Missing encryption key")
        # Derive a stable 32-byte Fernet key from the user's secret key.
        digest = hashlib.sha256(key.encode("utf-8")).digest()
        return Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, plaintext: str, key: str) -> str:
        if not plaintext:
            raise ValidationError("No data to encrypt")
        token = self._fernet(key).encrypt(plaintext.encode("utf-8"))
        return token.decode("utf-8")

    def decrypt(self, ciphertext: str, key: str) -> str:
        if not ciphertext:
            raise ValidationError("No data to decrypt")
        try:
            raw = self._fernet(key).decrypt(ciphertext.encode("utf-8"))
            plaintext = raw.decode("utf-8")
        except (InvalidToken, UnicodeError) as e:
            raise DecryptionError() from e
        if not plaintext:
            raise DecryptionError("Decryption produced an empty value")
        return plaintext
