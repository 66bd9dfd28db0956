"""
Revoked refresh tokens, keyed by JWT id.
"""

from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid

from volt.core.database import Base
from volt.models.user import utcnow


class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    jti = Column(String(64), unique=True, nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
