"""
User database model.
"""

from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class UserRole(str, Enum):
    """User roles enumeration."""

    USER = "user"
    VIP = "vip"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class UserStatus(str, Enum):
    """User account status enumeration."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"  # Soft deleted


class User(Base, TimestampMixin):
    """User profile as seen by the content platform.

    Credentials live with the identity provider that issues access tokens;
    this table only carries what articles, columns and comments display.
    """

    __tablename__ = "users"

    # Primary key
    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    # Profile
    username: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    avatar: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    intro: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    role: Mapped[str] = mapped_column(
        String(50),
        default=UserRole.USER.value,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(50),
        default=UserStatus.ACTIVE.value,
        nullable=False,
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value

    @property
    def is_admin(self) -> bool:
        """Check if user has admin privileges."""
        return self.role in (UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value)

    @property
    def is_vip(self) -> bool:
        return self.role == UserRole.VIP.value or self.is_admin

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
