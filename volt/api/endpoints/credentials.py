"""
Credential endpoints.

Every variant gets the same six routes; the router is built per variant from
its request and response schemas.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from volt.core.database import get_db
from volt.models.user import User
from volt.services.auth_service import get_current_user
from volt.services.credential_codec import CredentialVariant
from volt.services.credential_service import credential_service
from volt.schemas.credentials import CREDENTIAL_SCHEMAS, BulkDeletedResponse, DeletedResponse


def build_credential_router(variant: CredentialVariant) -> APIRouter:
    router = APIRouter()
    schemas = CREDENTIAL_SCHEMAS[variant]
    CreateSchema = schemas.create
    UpdateSchema = schemas.update
    ResponseSchema = schemas.response

    @router.post("", response_model=ResponseSchema, status_code=status.HTTP_201_CREATED)
    async def create_credential(
        payload: CreateSchema,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ):
        return await credential_service.create(variant, current_user, payload.model_dump(), db)

    @router.get("", response_model=List[ResponseSchema])
    async def list_credentials(
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ):
        return await credential_service.get_all(variant, current_user, db)

    @router.get("/{credential_id}", response_model=ResponseSchema)
    async def get_credential(
        credential_id: UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ):
        return await credential_service.get(variant, current_user, credential_id, db)

    @router.put("/{credential_id}", response_model=ResponseSchema)
    async def update_credential(
        credential_id: UUID,
        patch: UpdateSchema,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ):
        return await credential_service.update(
            variant, current_user, credential_id, patch.model_dump(exclude_unset=True), db
        )

    @router.delete("/{credential_id}", response_model=DeletedResponse)
    async def delete_credential(
        credential_id: UUID,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ):
        return await credential_service.delete(variant, current_user, credential_id, db)

    @router.delete("", response_model=BulkDeletedResponse)
    async def delete_all_credentials(
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ):
        return await credential_service.delete_all(variant, current_user, db)

    return router
