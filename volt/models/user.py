"""
User-related database models.
"""

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, DateTime, Uuid

from volt.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """User model for authentication and per-user key ownership."""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Basic information
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)

    # Authentication
    hashed_password = Column(String(128), nullable=False)
    password_changed_at = Column(DateTime(timezone=True), nullable=True)

    # Per-user encryption key, generated once at registration
    secret_key = Column(String(64), nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', email='{self.email}')>"
