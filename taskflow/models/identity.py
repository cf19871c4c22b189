"""
Identity ORM model.

Mirror of the external identity directory. This core only reads it.
"""

from __future__ import annotations

import enum

from sqlalchemy import Boolean, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from taskflow.models.base import Base, TimestampMixin, UUIDMixin


class IdentityRole(str, enum.Enum):
    """Directory role enumeration."""

    USER = "USER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class Identity(Base, UUIDMixin, TimestampMixin):
    """A person who can own, edit, review or list tasks."""

    __tablename__ = "identities"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    role: Mapped[IdentityRole] = mapped_column(
        Enum(IdentityRole, name="identity_role"),
        nullable=False,
        default=IdentityRole.USER,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def is_admin(self) -> bool:
        return self.role in (IdentityRole.ADMIN, IdentityRole.SUPER_ADMIN)

    @property
    def is_super_admin(self) -> bool:
        return self.role == IdentityRole.SUPER_ADMIN

    def __repr__(self) -> str:
        return f"<Identity id={self.id} email={self.email!r} role={self.role}>"
