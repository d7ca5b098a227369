"""
User model for identity management.
"""

import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.kernel.models.base import UserStoreBase, CreatedAtMixin, generate_uuid


class User(UserStoreBase, CreatedAtMixin):
    """User account. Immutable once created."""
    
    __tablename__ = "users"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    
    def __repr__(self) -> str:
        return f"<User {self.email}>"
