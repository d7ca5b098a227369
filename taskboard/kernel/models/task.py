"""
Task model (task store).
"""

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.kernel.models.base import TaskStoreBase, TimestampMixin, generate_uuid


class TaskStage(str, Enum):
    """Workflow stage of a task."""
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class Task(TaskStoreBase, TimestampMixin):
    """A unit of work on a board."""
    
    __tablename__ = "tasks"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    # Reference to a board in the board store; no foreign key across stores
    board_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    created_by: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )
    assignee_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
    )
    stage: Mapped[TaskStage] = mapped_column(
        String(20),
        nullable=False,
        default=TaskStage.TODO.value,
    )
    
    __table_args__ = (
        CheckConstraint(
            "stage IN ('To Do', 'In Progress', 'Done')",
            name="ck_tasks_stage",
        ),
    )
    
    def __repr__(self) -> str:
        return f"<Task {self.id} board={self.board_id} stage={self.stage}>"
