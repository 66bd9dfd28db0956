"""
Partial-update merger for encrypted credentials.
"""

from typing import Any, Dict, Mapping, Optional

from volt.services.credential_codec import CredentialCodec, CredentialVariant


class UpdateMerger:
    """Turns a plaintext patch into a sparse, allow-listed, encrypted patch.

    Only attributes that carry a non-empty value in the patch are staged, so
    fields the caller did not mention are never rewritten (and sensitive ones
    never get a fresh IV). Staged attributes that are not keys of the existing
    decrypted record are dropped silently.
    """

    def __init__(self, codec: Optional[CredentialCodec] = None):
        self.codec = codec or CredentialCodec()

    def merge(
        self,
        variant: CredentialVariant,
        patch: Mapping[str, Any],
        existing: Mapping[str, Any],
        key: str,
    ) -> Dict[str, Any]:
        sensitive = set(self.codec.sensitive_fields(variant))

        staged: Dict[str, Any] = {}
        for name, value in patch.items():
            if not value:
                continue
            if name in sensitive:
                staged[name] = self.codec.cipher.encrypt(value, key)
            else:
                staged[name] = value

        return {name: value for name, value in staged.items() if name in existing}
