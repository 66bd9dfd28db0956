"""
Credential models.

Each variant lives in its own table. Sensitive columns hold Fernet tokens and
are declared as unbounded strings; which columns are sensitive is decided by
``volt.services.credential_codec``, not here.
"""

from uuid import uuid4

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Uuid

from volt.core.database import Base
from volt.models.user import utcnow


class CredentialMixin:
    """Columns shared by every credential variant."""

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<{self.__class__.__name__}(id={self.id}, user_id={self.user_id})>"


class AddressCredential(CredentialMixin, Base):
    __tablename__ = "address_credentials"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    label = Column(String(255), nullable=False)
    city = Column(Text, nullable=False)
    street = Column(Text, nullable=False)
    state = Column(String(255), nullable=True)
    town = Column(String(255), nullable=True)
    zip_code = Column(Text, nullable=False)


class PasswordCredential(CredentialMixin, Base):
    __tablename__ = "password_credentials"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    service = Column(String(255), nullable=False)
    service_user_id = Column(Text, nullable=False)
    password = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)


class PaymentCredential(CredentialMixin, Base):
    __tablename__ = "payment_credentials"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    card_holder = Column(String(255), nullable=False)
    card_number = Column(Text, nullable=False)
    card_expiry = Column(Text, nullable=False)
    security_code = Column(Text, nullable=False)
    card_type = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)


class Secret(CredentialMixin, Base):
    """Generic secret, the unified successor of the login-password credential."""

    __tablename__ = "secrets"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    service = Column(String(255), nullable=False)
    service_user_id = Column(Text, nullable=False)
    password = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
