"""
Invitation model gating entry into a board's membership ledger.
"""

import uuid
from enum import Enum

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.kernel.models.base import BoardStoreBase, CreatedAtMixin, generate_uuid
from taskboard.kernel.models.board import BoardRole


class InvitationStatus(str, Enum):
    """Invitation lifecycle. Accepted and Rejected are terminal."""
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class Invitation(BoardStoreBase, CreatedAtMixin):
    """An Admin's offer of Member or Viewer access to another user."""
    
    __tablename__ = "invitations"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    board_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
    )
    inviter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )
    invitee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )
    role: Mapped[BoardRole] = mapped_column(
        String(20),
        nullable=False,
        default=BoardRole.VIEWER.value,
    )
    status: Mapped[InvitationStatus] = mapped_column(
        String(10),
        nullable=False,
        default=InvitationStatus.PENDING.value,
    )
    
    __table_args__ = (
        CheckConstraint("role IN ('Member', 'Viewer')", name="ck_invitations_role"),
        CheckConstraint(
            "status IN ('Pending', 'Accepted', 'Rejected')",
            name="ck_invitations_status",
        ),
        Index("ix_invitations_invitee_status", "invitee_id", "status"),
    )
    
    def __repr__(self) -> str:
        return f"<Invitation {self.id} board={self.board_id} status={self.status}>"
