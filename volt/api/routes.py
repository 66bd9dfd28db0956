"""
Main API router configuration.
"""

from fastapi import APIRouter
from volt.api.endpoints import auth, users
from volt.api.endpoints.credentials import build_credential_router
from volt.services.credential_codec import CredentialVariant

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/user", tags=["users"])

for variant in (
    CredentialVariant.SECRET,
    CredentialVariant.ADDRESS,
    CredentialVariant.PASSWORD,
    CredentialVariant.PAYMENT,
):
    api_router.include_router(
        build_credential_router(variant),
        prefix=f"/{variant.value}",
        tags=[f"{variant.value} credentials"],
    )
