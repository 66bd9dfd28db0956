"""
Credential codec: the declarative table of credential variants and the single
generic encoder/decoder driven by it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from volt.services.field_cipher import FieldCipher


class CredentialVariant(str, Enum):
    ADDRESS = "address"
    PASSWORD = "password"
    PAYMENT = "payment"
    SECRET = "secret"


@dataclass(frozen=True)
class VariantSpec:
    """Attributes of one credential variant.

    ``fields`` is the full ordered attribute list, ``sensitive`` the subset
    encrypted at rest and ``identity`` the attributes that identify a
    duplicate for the same owner.
    """

    fields: Tuple[str, ...]
    sensitive: Tuple[str, ...]
    identity: Tuple[str, ...]

    def __post_init__(self):
        unknown = set(self.sensitive + self.identity) - set(self.fields)
        if unknown:
            raise ValueError(f"Variant references undeclared fields: {sorted(unknown)}")


VARIANTS: Dict[CredentialVariant, VariantSpec] = {
    CredentialVariant.ADDRESS: VariantSpec(
        fields=("label", "city", "street", "state", "town", "zip_code"),
        sensitive=("city", "street", "zip_code"),
        identity=("label",),
    ),
    CredentialVariant.PASSWORD: VariantSpec(
        fields=("service", "service_user_id", "password", "notes"),
        sensitive=("service_user_id", "password"),
        identity=("service", "service_user_id"),
    ),
    CredentialVariant.PAYMENT: VariantSpec(
        fields=("card_holder", "card_number", "card_expiry", "security_code", "card_type", "notes"),
        sensitive=("card_number", "card_expiry", "security_code"),
        identity=("card_number",),
    ),
    CredentialVariant.SECRET: VariantSpec(
        fields=("service", "service_user_id", "password", "notes"),
        sensitive=("service_user_id", "password"),
        identity=("service", "service_user_id"),
    ),
}


class CredentialCodec:
    """Applies the field cipher to the sensitive attributes of a record."""

    def __init__(self, cipher: Optional[FieldCipher] = None, variants: Optional[Mapping[CredentialVariant, VariantSpec]] = None):
        self.cipher = cipher or FieldCipher()
        self.variants = dict(variants or VARIANTS)

    def spec(self, variant: CredentialVariant) -> VariantSpec:
        # KeyError on an unregistered variant is a configuration error.
        return self.variants[variant]

    def fields(self, variant: CredentialVariant) -> Tuple[str, ...]:
        return self.spec(variant).fields

    def sensitive_fields(self, variant: CredentialVariant) -> Tuple[str, ...]:
        return self.spec(variant).sensitive

    def to_record(self, variant: CredentialVariant, row: Any) -> Dict[str, Any]:
        """Project a stored row (ORM object or mapping) onto the variant's attributes."""
        if isinstance(row, Mapping):
            return {name: row.get(name) for name in self.fields(variant)}
        return {name: getattr(row, name, None) for name in self.fields(variant)}

    def encode(self, variant: CredentialVariant, record: Mapping[str, Any], key: str) -> Dict[str, Any]:
        """Encrypt every present, non-empty sensitive field; pass the rest through."""
        sensitive = self.sensitive_fields(variant)
        encoded = dict(record)
        for name in sensitive:
            value = encoded.get(name)
            if value:
                encoded[name] = self.cipher.encrypt(value, key)
        return encoded

    def decode(self, variant: CredentialVariant, record: Mapping[str, Any], key: str) -> Dict[str, Any]:
        """Decrypt every present, non-empty sensitive field.

        Raises:
            DecryptionError: If any sensitive field fails to decrypt.
        """
        sensitive = self.sensitive_fields(variant)
        decoded = dict(record)
        for name in sensitive:
            value = decoded.get(name)
            if value:
                decoded[name] = self.cipher.decrypt(value, key)
        return decoded
