"""
Session and recovery tokens.

Access and refresh tokens are HS256 JWTs signed with distinct keys. Recovery
tokens are opaque random strings persisted with an expiry; verification
consumes them with a single conditional UPDATE so a token can never be
validated twice.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from volt.core.config import Settings, settings
from volt.models.recovery_token import RecoveryToken
from volt.models.revoked_token import RevokedToken
from volt.models.user import User
from volt.services.email_service import EmailService
from volt.utils.exceptions import AuthError, ConflictError, NotFoundError
from volt.utils.formatters import as_utc

ACCESS = "access"
REFRESH = "refresh"


class TokenService:
    """Issues and verifies access, refresh and recovery tokens."""

    def __init__(self, config: Settings):
        self.config = config

    # ------------------------------------------------------------------
    # JWT helpers
    # ------------------------------------------------------------------

    def _secret_for(self, token_type: str) -> str:
        if token_type == ACCESS:
            return self.config.JWT_ACCESS_SECRET
        return self.config.JWT_REFRESH_SECRET

    def _issue(self, subject: Any, token_type: str, lifetime: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode = {
            "sub": str(subject),
            "iat": now,
            "exp": now + lifetime,
            "jti": uuid4().hex,
            "type": token_type,
        }
        return jwt.encode(to_encode, self._secret_for(token_type), algorithm=self.config.ALGORITHM)

    def _decode(self, token: Optional[str], token_type: str) -> Dict[str, Any]:
        if not token or token.count(".") != 2:
            raise AuthError("Malformed token", reason="malformed")
        try:
            payload = jwt.decode(
                token,
                self._secret_for(token_type),
                algorithms=[self.config.ALGORITHM],
            )
        except ExpiredSignatureError:
            raise AuthError("Token has expired", reason="expired")
        except JWTError:
            raise AuthError("Invalid token", reason="invalid")

        if payload.get("type") != token_type or not payload.get("sub"):
            raise AuthError("Invalid token", reason="invalid")
        return payload

    # ------------------------------------------------------------------
    # Access / refresh session
    # ------------------------------------------------------------------

    def issue_access_token(self, subject: Any) -> str:
        return self._issue(subject, ACCESS, timedelta(minutes=self.config.ACCESS_TOKEN_EXPIRE_MINUTES))

    def issue_refresh_token(self, subject: Any) -> str:
        return self._issue(subject, REFRESH, timedelta(days=self.config.REFRESH_TOKEN_EXPIRE_DAYS))

    def verify_access_token(self, token: Optional[str]) -> str:
        """Return the token subject or raise ``AuthError``."""
        return self._decode(token, ACCESS)["sub"]

    async def verify_refresh_token(self, token: Optional[str], db: AsyncSession) -> User:
        """Validate a refresh token against the revocation set and the owner's password age."""
        payload = self._decode(token, REFRESH)

        revoked = await db.execute(select(RevokedToken.id).where(RevokedToken.jti == payload.get("jti")))
        if revoked.scalar_one_or_none() is not None:
            raise AuthError("Token has been revoked", reason="invalid")

        try:
            user_id = UUID(payload["sub"])
        except ValueError:
            raise AuthError("Invalid token", reason="invalid")

        user = await db.get(User, user_id)
        if user is None:
            raise AuthError("Invalid token", reason="invalid")

        changed_at = as_utc(user.password_changed_at)
        if changed_at is not None and int(payload.get("iat", 0)) < int(changed_at.timestamp()):
            raise AuthError("Token was issued before the last password change", reason="invalid")

        return user

    async def refresh(self, refresh_token: Optional[str], db: AsyncSession) -> str:
        """Issue a new access token for the refresh token's subject.

        The refresh token itself is not rotated.
        """
        user = await self.verify_refresh_token(refresh_token, db)
        return self.issue_access_token(user.id)

    async def revoke_refresh_token(self, refresh_token: Optional[str], db: AsyncSession) -> bool:
        """Add a refresh token to the revocation set. Unusable tokens are ignored."""
        try:
            payload = self._decode(refresh_token, REFRESH)
            user_id = UUID(payload["sub"])
        except (AuthError, ValueError):
            return False

        existing = await db.execute(select(RevokedToken.id).where(RevokedToken.jti == payload["jti"]))
        if existing.scalar_one_or_none() is not None:
            return True

        db.add(RevokedToken(
            jti=payload["jti"],
            user_id=user_id,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        ))
        await db.commit()
        logger.info(f"Revoked refresh token for user {user_id}")
        return True

    # ------------------------------------------------------------------
    # Recovery
    # ------------------------------------------------------------------

    async def request_recovery(self, email: str, db: AsyncSession, mailer: EmailService) -> RecoveryToken:
        """Create a recovery token for ``email`` and hand it to the mailer."""
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError("User not found")

        now = datetime.now(timezone.utc)
        record = RecoveryToken(
            user_id=user.id,
            token=secrets.token_urlsafe(32),
            expires_at=now + timedelta(minutes=self.config.RECOVERY_TOKEN_EXPIRE_MINUTES),
        )
        db.add(record)
        await db.commit()
        await db.refresh(record)

        await mailer.send_password_reset(user.email, record.token)
        logger.info(f"Recovery token issued for user {user.id}")
        return record

    async def _get_recovery_token(self, token: str, db: AsyncSession) -> RecoveryToken:
        if not token:
            raise NotFoundError("Recovery token not found")
        result = await db.execute(
            select(RecoveryToken)
            .where(RecoveryToken.token == token)
            .execution_options(populate_existing=True)
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise NotFoundError("Recovery token not found")
        return record

    async def verify_recovery_token(self, token: str, db: AsyncSession) -> UUID:
        """Consume a recovery token and return its owner's id.

        Raises:
            NotFoundError: Unknown token.
            ConflictError: Token was already used.
            AuthError: Token has expired.
        """
        record = await self._get_recovery_token(token, db)
        now = datetime.now(timezone.utc)

        if record.used_at is not None:
            raise ConflictError("Recovery token has already been used")
        if now > as_utc(record.expires_at):
            raise AuthError("Recovery token has expired", reason="expired")

        result = await db.execute(
            update(RecoveryToken)
            .where(
                RecoveryToken.id == record.id,
                RecoveryToken.used_at.is_(None),
                RecoveryToken.expires_at > now,
            )
            .values(used_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError("Recovery token has already been used")

        await db.commit()
        await db.refresh(record)
        logger.info(f"Recovery token verified for user {record.user_id}")
        return record.user_id

    async def redeem_for_reset(self, token: str, email: str, db: AsyncSession) -> User:
        """Redeem a verified recovery token for exactly one password reset."""
        record = await self._get_recovery_token(token, db)
        user = await db.get(User, record.user_id)
        if user is None or user.email != email:
            raise AuthError("Recovery token does not match this account", reason="invalid")

        now = datetime.now(timezone.utc)
        if record.used_at is None:
            raise AuthError("Recovery token has not been verified", reason="invalid")
        if now > as_utc(record.expires_at):
            raise AuthError("Recovery token has expired", reason="expired")
        if record.reset_at is not None:
            raise ConflictError("Recovery token has already been redeemed")

        result = await db.execute(
            update(RecoveryToken)
            .where(
                RecoveryToken.id == record.id,
                RecoveryToken.used_at.is_not(None),
                RecoveryToken.reset_at.is_(None),
            )
            .values(reset_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError("Recovery token has already been redeemed")

        # Committed together with the new password by the caller.
        return user


token_service = TokenService(settings)


def get_token_service() -> TokenService:
    """Dependency for the token service."""
    return token_service
