"""
Kernel data models, grouped by the store that owns them.

- User store: User
- Board store: Board, BoardMember, Invitation, OutboxEvent
- Task store: Task
"""

from taskboard.kernel.models.base import (
    UserStoreBase,
    BoardStoreBase,
    TaskStoreBase,
    TimestampMixin,
    CreatedAtMixin,
    generate_uuid,
    utc_now,
)
from taskboard.kernel.models.user import User
from taskboard.kernel.models.board import Board, BoardMember, BoardRole
from taskboard.kernel.models.invitation import Invitation, InvitationStatus
from taskboard.kernel.models.outbox import OutboxEvent, OutboxStatus
from taskboard.kernel.models.task import Task, TaskStage

__all__ = [
    # Bases
    "UserStoreBase",
    "BoardStoreBase",
    "TaskStoreBase",
    "TimestampMixin",
    "CreatedAtMixin",
    "generate_uuid",
    "utc_now",
    # User store
    "User",
    # Board store
    "Board",
    "BoardMember",
    "BoardRole",
    "Invitation",
    "InvitationStatus",
    "OutboxEvent",
    "OutboxStatus",
    # Task store
    "Task",
    "TaskStage",
]
