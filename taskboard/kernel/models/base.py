"""
Declarative bases for the three isolated stores, plus shared column helpers.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, func, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# Use generic Uuid type for cross-database compatibility
_TYPE_ANNOTATION_MAP = {
    uuid.UUID: Uuid(),
}


# Each store gets its own DeclarativeBase so each has its own MetaData;
# nothing may declare a foreign key into another store.

class UserStoreBase(DeclarativeBase):
    """Base class for tables in the user store."""

    type_annotation_map = _TYPE_ANNOTATION_MAP


class BoardStoreBase(DeclarativeBase):
    """Base class for tables in the board store."""

    type_annotation_map = _TYPE_ANNOTATION_MAP


class TaskStoreBase(DeclarativeBase):
    """Base class for tables in the task store."""

    type_annotation_map = _TYPE_ANNOTATION_MAP


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def generate_uuid() -> uuid.UUID:
    """Generate a new UUID."""
    return uuid.uuid4()


class CreatedAtMixin:
    """Mixin for a created_at timestamp."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )


class TimestampMixin(CreatedAtMixin):
    """Mixin for created_at and updated_at timestamps."""
    
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
        nullable=False,
    )
