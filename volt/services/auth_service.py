"""
Authentication service for user management and session resolution.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID
import hashlib
import bcrypt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, or_
from loguru import logger

from volt.core.database import get_db
from volt.models.user import User
from volt.models.credential import AddressCredential, PasswordCredential, PaymentCredential, Secret
from volt.models.recovery_token import RecoveryToken
from volt.models.revoked_token import RevokedToken
from volt.services.secret_key_store import SecretKeyStore, secret_key_store
from volt.services.token_service import TokenService, get_token_service
from volt.utils.exceptions import AuthError, ConflictError, ValidationError

MIN_PASSWORD_LENGTH = 8

bearer_scheme = HTTPBearer(auto_error=False)


class AuthService:
    """Service for authentication and account management."""

    def __init__(self, key_store: Optional[SecretKeyStore] = None):
        self.key_store = key_store or secret_key_store

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt."""
        password_bytes = password.encode('utf-8')

        # Bcrypt has a 72-byte limit - handle long passwords
        if len(password_bytes) > 72:
            logger.debug(f"Password exceeds 72 bytes ({len(password_bytes)}), pre-hashing with SHA256")
            password_bytes = hashlib.sha256(password_bytes).hexdigest().encode('utf-8')

        hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt())
        return hashed.decode('utf-8')

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        password_bytes = plain_password.encode('utf-8')
        hashed_bytes = hashed_password.encode('utf-8')

        if len(password_bytes) > 72:
            password_bytes = hashlib.sha256(password_bytes).hexdigest().encode('utf-8')

        return bcrypt.checkpw(password_bytes, hashed_bytes)

    def _check_password(self, password: str) -> None:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError("invalid password length")

    async def get_user_by_username(self, username: str, db: AsyncSession) -> Optional[User]:
        """Get user by username."""
        result = await db.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str, db: AsyncSession) -> Optional[User]:
        """Get user by email."""
        result = await db.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: str, db: AsyncSession) -> Optional[User]:
        """Get user by ID."""
        try:
            user_uuid = UUID(str(user_id))
        except ValueError:
            return None
        return await db.get(User, user_uuid)

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> User:
        """Create a new user with a freshly generated secret key."""
        self._check_password(password)

        if await self.get_user_by_email(email, db):
            raise ConflictError("User already exists")

        if await self.get_user_by_username(username, db):
            raise ConflictError("Username taken")

        user = User(
            username=username,
            email=email,
            hashed_password=self.hash_password(password),
            secret_key=self.key_store.generate(),
        )

        db.add(user)
        await db.commit()
        await db.refresh(user)

        logger.info(f"Created new user: {user.id}")
        return user

    async def authenticate_user(
        self,
        email: str,
        password: str,
        db: AsyncSession
    ) -> Optional[User]:
        """Authenticate a user with email and password."""
        user = await self.get_user_by_email(email, db)

        if not user:
            return None

        if not self.verify_password(password, user.hashed_password):
            return None

        return user

    async def get_current_user(
        self,
        credentials: Optional[HTTPAuthorizationCredentials],
        db: AsyncSession,
        tokens: TokenService,
    ) -> User:
        """Get current user from a Bearer access token."""
        if credentials is None or credentials.scheme.lower() != "bearer":
            raise AuthError("Missing bearer token", reason="malformed")

        subject = tokens.verify_access_token(credentials.credentials)

        user = await self.get_user_by_id(subject, db)
        if user is None:
            raise AuthError("Invalid token", reason="invalid")

        return user

    async def update_user(
        self,
        user: User,
        db: AsyncSession,
        username: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        """Update profile fields; at least one must be given."""
        if not username and not email and not password:
            raise ValidationError("Missing credentials")

        if username or email:
            clauses = []
            if username:
                clauses.append(User.username == username)
            if email:
                clauses.append(User.email == email)
            result = await db.execute(
                select(User.id).where(or_(*clauses), User.id != user.id)
            )
            if result.first() is not None:
                raise ConflictError("Username or email already in use")

        if username:
            user.username = username
        if email:
            user.email = email
        if password:
            self._check_password(password)
            user.hashed_password = self.hash_password(password)
            user.password_changed_at = datetime.now(timezone.utc)

        await db.commit()
        await db.refresh(user)
        logger.info(f"Updated profile for user {user.id}")
        return user

    async def reset_password(self, user: User, new_password: str, db: AsyncSession) -> None:
        """Persist a new password after a recovery token has been redeemed.

        Earlier refresh tokens stop working because ``password_changed_at``
        moves forward.
        """
        self._check_password(new_password)
        user.hashed_password = self.hash_password(new_password)
        user.password_changed_at = datetime.now(timezone.utc)
        await db.commit()
        logger.info(f"Password reset for user {user.id}")

    async def delete_user(self, user: User, db: AsyncSession) -> None:
        """Delete a user together with everything they own."""
        for model in (AddressCredential, PasswordCredential, PaymentCredential, Secret, RecoveryToken, RevokedToken):
            await db.execute(delete(model).where(model.user_id == user.id))
        await db.delete(user)
        await db.commit()
        logger.info(f"Deleted user {user.id}")


# Global instance for dependency injection
auth_service = AuthService()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    """Dependency for getting current user."""
    return await auth_service.get_current_user(credentials, db, tokens)
