"""
Credential service: create, read, update and delete encrypted credentials of
every variant through one code path.
"""

from typing import Any, Dict, List, Mapping, Optional, Type
from uuid import UUID

from loguru import logger
from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from volt.models.credential import AddressCredential, PasswordCredential, PaymentCredential, Secret
from volt.models.user import User, utcnow
from volt.services.authorization import authorize
from volt.services.credential_codec import CredentialCodec, CredentialVariant
from volt.services.secret_key_store import SecretKeyStore, secret_key_store
from volt.services.update_merger import UpdateMerger
from volt.utils.exceptions import ConflictError, NotFoundError, ValidationError


CREDENTIAL_MODELS: Dict[CredentialVariant, Type] = {
    CredentialVariant.ADDRESS: AddressCredential,
    CredentialVariant.PASSWORD: PasswordCredential,
    CredentialVariant.PAYMENT: PaymentCredential,
    CredentialVariant.SECRET: Secret,
}


class CredentialService:
    """Service for a user's encrypted credentials."""

    def __init__(self, codec: Optional[CredentialCodec] = None, key_store: Optional[SecretKeyStore] = None):
        self.codec = codec or CredentialCodec()
        self.key_store = key_store or secret_key_store
        self.merger = UpdateMerger(self.codec)

    def _model(self, variant: CredentialVariant) -> Type:
        return CREDENTIAL_MODELS[variant]

    def _view(self, variant: CredentialVariant, row: Any, key: str) -> Dict[str, Any]:
        """Decrypted plaintext view of a stored row."""
        record = self.codec.decode(variant, self.codec.to_record(variant, row), key)
        record.update(
            id=row.id,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
        return record

    async def _owned_rows(self, variant: CredentialVariant, user: User, db: AsyncSession) -> List[Any]:
        model = self._model(variant)
        result = await db.execute(
            select(model).where(model.user_id == user.id).order_by(model.created_at)
        )
        return list(result.scalars().all())

    async def _fetch(self, variant: CredentialVariant, user: User, credential_id: UUID, db: AsyncSession) -> Any:
        model = self._model(variant)
        row = await db.get(model, credential_id)
        return authorize(user.id, row, message=f"No {variant.value} credential found")

    async def _ensure_unique(
        self,
        variant: CredentialVariant,
        user: User,
        record: Mapping[str, Any],
        key: str,
        db: AsyncSession,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        """Raise ``ConflictError`` if another of the user's credentials has the same identity."""
        identity = self.codec.spec(variant).identity
        wanted = tuple(record.get(name) for name in identity)
        # Identity fields may be encrypted, so duplicates are found on decrypted values.
        for row in await self._owned_rows(variant, user, db):
            if row.id == exclude_id:
                continue
            current = self.codec.decode(variant, self.codec.to_record(variant, row), key)
            if tuple(current.get(name) for name in identity) == wanted:
                raise ConflictError("Credential already exists")

    async def create(
        self,
        variant: CredentialVariant,
        user: User,
        payload: Mapping[str, Any],
        db: AsyncSession,
    ) -> Dict[str, Any]:
        key = await self.key_store.get_key(user.id, db)
        record = self.codec.to_record(variant, payload)
        await self._ensure_unique(variant, user, record, key, db)

        row = self._model(variant)(user_id=user.id, **self.codec.encode(variant, record, key))
        db.add(row)
        await db.commit()
        await db.refresh(row)

        logger.info(f"user: {user.id} created a {variant.value} credential")
        return self._view(variant, row, key)

    async def get_all(self, variant: CredentialVariant, user: User, db: AsyncSession) -> List[Dict[str, Any]]:
        key = await self.key_store.get_key(user.id, db)
        rows = await self._owned_rows(variant, user, db)
        logger.info(f"user: {user.id} fetched all {variant.value} credentials")
        return [self._view(variant, row, key) for row in rows]

    async def get(
        self,
        variant: CredentialVariant,
        user: User,
        credential_id: UUID,
        db: AsyncSession,
    ) -> Dict[str, Any]:
        row = await self._fetch(variant, user, credential_id, db)
        key = await self.key_store.get_key(user.id, db)
        logger.info(f"user: {user.id} fetched a {variant.value} credential")
        return self._view(variant, row, key)

    async def update(
        self,
        variant: CredentialVariant,
        user: User,
        credential_id: UUID,
        patch: Mapping[str, Any],
        db: AsyncSession,
    ) -> Dict[str, Any]:
        if not any(patch.values()):
            raise ValidationError("Missing credentials")

        model = self._model(variant)
        row = await self._fetch(variant, user, credential_id, db)
        key = await self.key_store.get_key(user.id, db)

        existing = self.codec.decode(variant, self.codec.to_record(variant, row), key)
        changes = self.merger.merge(variant, patch, existing, key)
        if not changes:
            return self._view(variant, row, key)

        if set(changes) & set(self.codec.spec(variant).identity):
            merged = {**existing, **{name: patch[name] for name in changes}}
            await self._ensure_unique(variant, user, merged, key, db, exclude_id=row.id)

        read_version = row.version
        result = await db.execute(
            update(model)
            .where(model.id == row.id, model.user_id == user.id, model.version == read_version)
            .values(**changes, version=read_version + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError("Credential was modified concurrently, retry the update")

        await db.commit()
        await db.refresh(row)

        logger.info(f"user: {user.id} updated a {variant.value} credential")
        return self._view(variant, row, key)

    async def delete(
        self,
        variant: CredentialVariant,
        user: User,
        credential_id: UUID,
        db: AsyncSession,
    ) -> Dict[str, Any]:
        row = await self._fetch(variant, user, credential_id, db)
        deleted_id = row.id
        await db.delete(row)
        await db.commit()
        logger.info(f"user: {user.id} deleted a {variant.value} credential")
        return {"id": deleted_id}

    async def delete_all(self, variant: CredentialVariant, user: User, db: AsyncSession) -> Dict[str, int]:
        model = self._model(variant)
        count = await db.scalar(
            select(func.count()).select_from(model).where(model.user_id == user.id)
        )
        if not count:
            raise NotFoundError(f"No {variant.value} credentials found")

        await db.execute(delete(model).where(model.user_id == user.id))
        await db.commit()
        logger.info(f"user: {user.id} deleted all {variant.value} credentials")
        return {"deleted": count}


credential_service = CredentialService()
