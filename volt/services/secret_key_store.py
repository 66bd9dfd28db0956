"""
Per-user secret key store.

Each account owns exactly one symmetric key, generated at registration and
kept on the user row. There is no rotation: rotating would require
re-encrypting every sensitive field the user owns in one transaction.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from volt.models.user import User
from volt.services.field_cipher import generate_secret_key
from volt.utils.exceptions import NotFoundError


class SecretKeyStore:
    """Issues and looks up per-user secret keys."""

    def generate(self) -> str:
        return generate_secret_key()

    async def get_key(self, user_id: UUID, db: AsyncSession) -> str:
        result = await db.execute(select(User.secret_key).where(User.id == user_id))
        key = result.scalar_one_or_none()
        if key is None:
            raise NotFoundError("User not found")
        return key


secret_key_store = SecretKeyStore()
