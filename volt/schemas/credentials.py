"""
Credential request and response schemas, one set per variant.

Responses always carry decrypted values; ciphertext never leaves the service.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Type
from uuid import UUID

from pydantic import BaseModel, Field

from volt.services.credential_codec import CredentialVariant


class CredentialResponse(BaseModel):
    id: UUID
    created_at: datetime
    updated_at: datetime


class DeletedResponse(BaseModel):
    id: UUID


class BulkDeletedResponse(BaseModel):
    deleted: int


# Address

class AddressCreate(BaseModel):
    label: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1)
    street: str = Field(..., min_length=1)
    state: Optional[str] = Field(None, max_length=255)
    town: Optional[str] = Field(None, max_length=255)
    zip_code: str = Field(..., min_length=1)


class AddressUpdate(BaseModel):
    label: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = None
    street: Optional[str] = None
    state: Optional[str] = Field(None, max_length=255)
    town: Optional[str] = Field(None, max_length=255)
    zip_code: Optional[str] = None


class AddressResponse(CredentialResponse):
    label: str
    city: str
    street: str
    state: Optional[str] = None
    town: Optional[str] = None
    zip_code: str


# Password / secret

class PasswordCreate(BaseModel):
    service: str = Field(..., min_length=1, max_length=255)
    service_user_id: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    notes: Optional[str] = None


class PasswordUpdate(BaseModel):
    service: Optional[str] = Field(None, max_length=255)
    service_user_id: Optional[str] = None
    password: Optional[str] = None
    notes: Optional[str] = None


class PasswordResponse(CredentialResponse):
    service: str
    service_user_id: str
    password: str
    notes: Optional[str] = None


# Payment

class PaymentCreate(BaseModel):
    card_holder: str = Field(..., min_length=1, max_length=255)
    card_number: str = Field(..., min_length=1)
    card_expiry: str = Field(..., min_length=1)
    security_code: str = Field(..., min_length=1)
    card_type: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class PaymentUpdate(BaseModel):
    card_holder: Optional[str] = Field(None, max_length=255)
    card_number: Optional[str] = None
    card_expiry: Optional[str] = None
    security_code: Optional[str] = None
    card_type: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class PaymentResponse(CredentialResponse):
    card_holder: str
    card_number: str
    card_expiry: str
    security_code: str
    card_type: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class CredentialSchemas:
    create: Type[BaseModel]
    update: Type[BaseModel]
    response: Type[BaseModel]


CREDENTIAL_SCHEMAS: Dict[CredentialVariant, CredentialSchemas] = {
    CredentialVariant.ADDRESS: CredentialSchemas(
        create=AddressCreate, update=AddressUpdate, response=AddressResponse
    ),
    CredentialVariant.PASSWORD: CredentialSchemas(
        create=PasswordCreate, update=PasswordUpdate, response=PasswordResponse
    ),
    CredentialVariant.PAYMENT: CredentialSchemas(
        create=PaymentCreate, update=PaymentUpdate, response=PaymentResponse
    ),
    CredentialVariant.SECRET: CredentialSchemas(
        create=PasswordCreate, update=PasswordUpdate, response=PasswordResponse
    ),
}
