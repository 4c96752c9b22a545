"""
Account dan IdentityBinding model untuk AuthGate API.
Account adalah anchor identitas; setiap metode login dicatat sebagai IdentityBinding.
"""

from typing import List, Optional
import uuid

from sqlalchemy import (
    Column, String, Boolean, ForeignKey, Uuid, Enum as SAEnum,
    UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped

from authgate.core.constants import AccountStatus, IdentityProvider
from authgate.db.base import BaseModel


class Account(BaseModel):
    """
    Account model.

    Attributes:
        a_id: Unique account ID (UUID)
        a_email: Normalized email (optional)
        a_phone: Normalized E.164 phone (optional)
        a_password_hash: Argon2 hash, hanya ada jika akun punya EMAIL binding dengan password
        a_status: ACTIVE / SUSPENDED / DELETED (soft delete)
        a_role: Role claim untuk authorization step
        a_mfa_enabled: Apakah TOTP wajib saat login
        a_mfa_secret: TOTP secret terenkripsi (Fernet), ada setelah setup
    """

    __tablename__ = "accounts"

    a_id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False
    )
    a_email = Column(String(255), unique=True, nullable=True, index=True)
    a_phone = Column(String(20), unique=True, nullable=True, index=True)
    a_password_hash = Column(String(255), nullable=True)
    a_status = Column(
        SAEnum(AccountStatus, name="account_status", native_enum=False, length=20),
        nullable=False,
        default=AccountStatus.ACTIVE
    )
    a_role = Column(String(50), nullable=False, default="user")
    a_mfa_enabled = Column(Boolean, nullable=False, default=False)
    a_mfa_secret = Column(String(512), nullable=True)

    bindings: Mapped[List["IdentityBinding"]] = relationship(
        "IdentityBinding",
        back_populates="account",
        cascade="all, delete-orphan",
        lazy="selectin"
    )

    __table_args__ = (
        CheckConstraint(
            "NOT a_mfa_enabled OR a_mfa_secret IS NOT NULL",
            name="ck_accounts_mfa_secret_present"
        ),
    )

    @property
    def is_active(self) -> bool:
        """Hanya akun ACTIVE yang boleh login."""
        return self.a_status == AccountStatus.ACTIVE


class IdentityBinding(BaseModel):
    """
    Mapping (provider, provider_key) -> Account.

    provider_key unik secara global: email, nomor telepon, dan Google subject id
    tidak pernah bertabrakan.
    """

    __tablename__ = "identity_bindings"

    ib_id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False
    )
    ib_provider = Column(
        SAEnum(IdentityProvider, name="identity_provider", native_enum=False, length=20),
        nullable=False
    )
    ib_provider_key = Column(String(255), nullable=False, unique=True, index=True)
    ib_account_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("accounts.a_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    account: Mapped[Optional[Account]] = relationship(
        "Account",
        back_populates="bindings",
        lazy="joined"
    )

    __table_args__ = (
        UniqueConstraint("ib_provider", "ib_provider_key", name="uq_identity_bindings_provider_key"),
    )
