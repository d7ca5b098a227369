"""
Board and membership models (board store).
"""

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.kernel.models.base import BoardStoreBase, CreatedAtMixin, generate_uuid


class BoardRole(str, Enum):
    """Roles a user can hold on a board."""
    ADMIN = "Admin"
    MEMBER = "Member"
    VIEWER = "Viewer"


class Board(BoardStoreBase, CreatedAtMixin):
    """A shared workspace owning members, invitations and (by reference) tasks."""
    
    __tablename__ = "boards"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    name: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    # User ID from the user store
    created_by: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Board {self.id} {self.name!r}>"


class BoardMember(BoardStoreBase):
    """Membership ledger row: (board, user) -> role."""
    
    __tablename__ = "board_members"
    
    board_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("boards.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # User ID from the user store
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
    )
    role: Mapped[BoardRole] = mapped_column(
        String(20),
        nullable=False,
    )
    
    __table_args__ = (
        CheckConstraint("role IN ('Admin', 'Member', 'Viewer')", name="ck_board_members_role"),
        # Admin is never invitable, so the creator stays the only Admin row
        Index(
            "unique_admin_per_board",
            "board_id",
            unique=True,
            postgresql_where=text("role = 'Admin'"),
            sqlite_where=text("role = 'Admin'"),
        ),
    )
    
    def __repr__(self) -> str:
        return f"<BoardMember board={self.board_id} user={self.user_id} role={self.role}>"
