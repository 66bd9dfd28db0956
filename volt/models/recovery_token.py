"""
Account recovery token model.

A token is created by a recovery request, consumed once by verification
(``used_at``) and may then authorize exactly one password reset
(``reset_at``). It is dead after ``expires_at`` whatever its state.
"""

from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid

from volt.core.database import Base
from volt.models.user import utcnow


class RecoveryToken(Base):
    __tablename__ = "recovery_tokens"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    token = Column(String(128), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    reset_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
