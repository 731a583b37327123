# src/quillpost/models/user.py
"""SQLAlchemy model for platform accounts."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quillpost.db.ids import new_object_id
from quillpost.db.session import Base
from quillpost.db.time import utcnow

if TYPE_CHECKING:
    from .post import Post

ROLE_USER = "user"
ROLE_ADMIN = "admin"
USER_ROLES = (ROLE_USER, ROLE_ADMIN)


class User(Base):
    """Registered account. Accounts are created by the external auth service."""

    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # Never serialized; response schemas do not declare it.
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    bio: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    avatar: Mapped[str] = mapped_column(Text, nullable=False, default="")
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_USER)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # Owned posts are removed explicitly before the account is deleted.
    posts: Mapped[list[Post]] = relationship(
        "Post",
        back_populates="author",
        passive_deletes="all",
    )

    @property
    def is_admin(self) -> bool:
        """Return True when the account carries the admin role."""
        return self.role == ROLE_ADMIN
