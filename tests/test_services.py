"""
Tests for core services.
"""

import pytest
from uuid import uuid4
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from volt.models.credential import Secret, PaymentCredential
from volt.models.user import User
from volt.services.auth_service import AuthService
from volt.services.authorization import authorize
from volt.services.credential_codec import CredentialVariant
from volt.services.credential_service import CredentialService
from volt.services.secret_key_store import SecretKeyStore
from volt.utils.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)

SECRET = {
    "service": "github",
    "service_user_id": "octocat",
    "password": "hunter22",
    "notes": None,
}


class Owned:
    def __init__(self, user_id):
        self.user_id = user_id


def test_authorize_owner():
    owner = uuid4()
    resource = Owned(owner)

    assert authorize(owner, resource) is resource


def test_authorize_missing_and_foreign():
    with pytest.raises(NotFoundError):
        authorize(uuid4(), None)
    with pytest.raises(ForbiddenError):
        authorize(uuid4(), Owned(uuid4()))


@pytest.mark.asyncio
async def test_auth_service_create_user(db_session: AsyncSession):
    """Test AuthService.create_user."""
    service = AuthService()

    user = await service.create_user(
        username="testuser2",
        email="testuser2@example.com",
        password="password123",
        db=db_session
    )

    assert user.id is not None
    assert user.hashed_password != "password123"
    assert len(user.secret_key) == 64


@pytest.mark.asyncio
async def test_auth_service_duplicates(db_session: AsyncSession, test_user: User):
    service = AuthService()

    with pytest.raises(ConflictError):
        await service.create_user("someone", test_user.email, "password123", db_session)
    with pytest.raises(ConflictError):
        await service.create_user(test_user.username, "fresh@example.com", "password123", db_session)


@pytest.mark.asyncio
async def test_auth_service_short_password(db_session: AsyncSession):
    with pytest.raises(ValidationError):
        await AuthService().create_user("shorty", "shorty@example.com", "short", db_session)


def test_long_passwords_are_hashed():
    """Passwords beyond bcrypt's 72-byte limit still verify."""
    service = AuthService()
    password = "x" * 100

    hashed = service.hash_password(password)

    assert service.verify_password(password, hashed)
    assert not service.verify_password("x" * 99, hashed)


@pytest.mark.asyncio
async def test_authenticate_user(db_session: AsyncSession, test_user: User):
    service = AuthService()

    assert await service.authenticate_user("test@example.com", "testpassword123", db_session) is test_user
    assert await service.authenticate_user("test@example.com", "wrong-password", db_session) is None
    assert await service.authenticate_user("missing@example.com", "testpassword123", db_session) is None


@pytest.mark.asyncio
async def test_secret_key_store(db_session: AsyncSession, test_user: User):
    store = SecretKeyStore()

    assert await store.get_key(test_user.id, db_session) == test_user.secret_key
    with pytest.raises(NotFoundError):
        await store.get_key(uuid4(), db_session)


@pytest.mark.asyncio
async def test_credential_encrypted_at_rest(db_session: AsyncSession, test_user: User):
    """Test sensitive fields are stored as ciphertext and returned as plaintext."""
    service = CredentialService()

    created = await service.create(CredentialVariant.SECRET, test_user, SECRET, db_session)

    assert created["password"] == "hunter22"
    assert created["service_user_id"] == "octocat"

    result = await db_session.execute(select(Secret.password, Secret.service).where(Secret.id == created["id"]))
    stored_password, stored_service = result.one()
    assert stored_password != "hunter22"
    assert stored_service == "github"


@pytest.mark.asyncio
async def test_credential_duplicate(db_session: AsyncSession, test_user: User):
    service = CredentialService()
    await service.create(CredentialVariant.SECRET, test_user, SECRET, db_session)

    with pytest.raises(ConflictError):
        await service.create(CredentialVariant.SECRET, test_user, {**SECRET, "password": "other"}, db_session)


@pytest.mark.asyncio
async def test_credential_same_identity_for_other_user(db_session: AsyncSession, test_user: User, other_user: User):
    service = CredentialService()
    await service.create(CredentialVariant.SECRET, test_user, SECRET, db_session)

    created = await service.create(CredentialVariant.SECRET, other_user, SECRET, db_session)

    assert created["service"] == "github"


@pytest.mark.asyncio
async def test_credential_partial_update(db_session: AsyncSession, test_user: User):
    """Test an update rewrites only the fields it names."""
    service = CredentialService()
    created = await service.create(
        CredentialVariant.PAYMENT,
        test_user,
        {
            "card_holder": "Alice",
            "card_number": "4111111111111111",
            "card_expiry": "12/29",
            "security_code": "123",
            "card_type": "visa",
        },
        db_session,
    )
    before = await db_session.execute(
        select(PaymentCredential.card_number, PaymentCredential.security_code)
        .where(PaymentCredential.id == created["id"])
    )
    card_number_before, code_before = before.one()

    updated = await service.update(
        CredentialVariant.PAYMENT, test_user, created["id"], {"security_code": "999", "user_id": "x"}, db_session
    )

    assert updated["security_code"] == "999"
    assert updated["card_number"] == "4111111111111111"

    after = await db_session.execute(
        select(PaymentCredential.card_number, PaymentCredential.security_code, PaymentCredential.version)
        .where(PaymentCredential.id == created["id"])
    )
    card_number_after, code_after, version = after.one()
    assert card_number_after == card_number_before
    assert code_after != code_before
    assert version == 2


@pytest.mark.asyncio
async def test_credential_empty_update(db_session: AsyncSession, test_user: User):
    service = CredentialService()
    created = await service.create(CredentialVariant.SECRET, test_user, SECRET, db_session)

    with pytest.raises(ValidationError):
        await service.update(CredentialVariant.SECRET, test_user, created["id"], {}, db_session)
    with pytest.raises(ValidationError):
        await service.update(CredentialVariant.SECRET, test_user, created["id"], {"notes": ""}, db_session)


@pytest.mark.asyncio
async def test_credential_concurrent_update(db_session: AsyncSession, test_user: User):
    """Test an update against a stale version fails with a conflict."""
    service = CredentialService()
    created = await service.create(CredentialVariant.SECRET, test_user, SECRET, db_session)

    # This session has read version 1 and keeps the row in its identity map.
    held = await db_session.get(Secret, created["id"])
    assert held.version == 1

    # Another writer bumps the version behind this session's back.
    await db_session.execute(
        update(Secret)
        .where(Secret.id == created["id"])
        .values(version=5)
        .execution_options(synchronize_session=False)
    )
    await db_session.commit()

    with pytest.raises(ConflictError):
        await service.update(CredentialVariant.SECRET, test_user, created["id"], {"notes": "late"}, db_session)


@pytest.mark.asyncio
async def test_credential_ownership(db_session: AsyncSession, test_user: User, other_user: User):
    service = CredentialService()
    created = await service.create(CredentialVariant.SECRET, test_user, SECRET, db_session)

    with pytest.raises(ForbiddenError):
        await service.get(CredentialVariant.SECRET, other_user, created["id"], db_session)
    with pytest.raises(ForbiddenError):
        await service.delete(CredentialVariant.SECRET, other_user, created["id"], db_session)
    with pytest.raises(NotFoundError):
        await service.get(CredentialVariant.SECRET, test_user, uuid4(), db_session)


@pytest.mark.asyncio
async def test_credential_delete_all(db_session: AsyncSession, test_user: User):
    service = CredentialService()
    await service.create(CredentialVariant.SECRET, test_user, SECRET, db_session)
    await service.create(CredentialVariant.SECRET, test_user, {**SECRET, "service": "gitlab"}, db_session)

    assert await service.delete_all(CredentialVariant.SECRET, test_user, db_session) == {"deleted": 2}
    assert await service.get_all(CredentialVariant.SECRET, test_user, db_session) == []

    with pytest.raises(NotFoundError):
        await service.delete_all(CredentialVariant.SECRET, test_user, db_session)


@pytest.mark.asyncio
async def test_delete_user_removes_credentials(db_session: AsyncSession, test_user: User):
    service = CredentialService()
    await service.create(CredentialVariant.SECRET, test_user, SECRET, db_session)
    user_id = test_user.id

    await AuthService().delete_user(test_user, db_session)

    assert await db_session.get(User, user_id) is None
    remaining = await db_session.execute(select(Secret.id).where(Secret.user_id == user_id))
    assert remaining.first() is None


@pytest.mark.asyncio
async def test_credential_update_to_duplicate_identity(db_session: AsyncSession, test_user: User):
    """Test an update cannot give a credential another one's identity."""
    service = CredentialService()
    await service.create(CredentialVariant.SECRET, test_user, {**SECRET, "service_user_id": "a"}, db_session)
    second = await service.create(CredentialVariant.SECRET, test_user, {**SECRET, "service_user_id": "b"}, db_session)

    with pytest.raises(ConflictError):
        await service.update(CredentialVariant.SECRET, test_user, second["id"], {"service_user_id": "a"}, db_session)

    records = await service.get_all(CredentialVariant.SECRET, test_user, db_session)
    assert sorted(record["service_user_id"] for record in records) == ["a", "b"]


@pytest.mark.asyncio
async def test_credential_update_keeps_own_identity(db_session: AsyncSession, test_user: User):
    service = CredentialService()
    created = await service.create(CredentialVariant.SECRET, test_user, SECRET, db_session)

    updated = await service.update(
        CredentialVariant.SECRET, test_user, created["id"], {"service": "github", "notes": "same identity"}, db_session
    )

    assert updated["notes"] == "same identity"
