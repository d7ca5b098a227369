"""
Kernel layer: stores, identity, membership, boards, tasks and events.

Store invariants:
- Each store (users, boards, tasks) is reachable only through its own session
- Membership invariants are enforced by the board store's constraints
- Board deletion reaches the task store only through the board-deleted topic
"""

from taskboard.kernel.models import (
    Board,
    BoardMember,
    BoardRole,
    Invitation,
    InvitationStatus,
    OutboxEvent,
    OutboxStatus,
    Task,
    TaskStage,
    User,
)

__all__ = [
    # Identity
    "User",
    # Boards & membership
    "Board",
    "BoardMember",
    "BoardRole",
    "Invitation",
    "InvitationStatus",
    # Tasks
    "Task",
    "TaskStage",
    # Outbox
    "OutboxEvent",
    "OutboxStatus",
]
