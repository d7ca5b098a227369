"""
Task registry.

Tasks live in their own store. Authorization asks a MembershipChecker for
the acting user's role on every call; no role is cached.
"""

import uuid
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.database import commit_or_raise
from taskboard.errors import Internal, InvalidArgument, NotFound, PermissionDenied
from taskboard.kernel.models.base import utc_now
from taskboard.kernel.models.board import BoardRole
from taskboard.kernel.models.task import Task, TaskStage
from taskboard.kernel.permissions.membership_checker import MembershipChecker
from taskboard.kernel.permissions.policy import BoardAction, can_modify_task, is_allowed
from taskboard.logging_config import get_logger

logger = get_logger(__name__)

INVALID_STAGE = "stage must be 'To Do', 'In Progress', or 'Done'"


def parse_stage(value: str) -> TaskStage:
    try:
        return TaskStage(value)
    except ValueError:
        raise InvalidArgument(INVALID_STAGE) from None


async def delete_tasks_for_board(session: AsyncSession, board_id: uuid.UUID) -> int:
    """Delete every task of a board. Returns the number of rows removed."""
    result = await session.execute(
        delete(Task).where(Task.board_id == board_id),
        execution_options={"synchronize_session": False},
    )
    return result.rowcount


class TaskRegistry:
    """
    Service for board tasks.

    Usage:
        registry = TaskRegistry(session, LedgerMembershipChecker(board_session_maker))
        task = await registry.create(user_id, board_id, "Write release notes")
    """

    def __init__(self, session: AsyncSession, membership: MembershipChecker):
        self.session = session
        self.membership = membership

    async def _role(self, board_id: uuid.UUID, user_id: uuid.UUID) -> Optional[BoardRole]:
        return await self.membership.role_of(board_id, user_id)

    async def _load(self, task_id: uuid.UUID) -> Task:
        task = await self.session.get(Task, task_id)
        if task is None:
            raise NotFound("task not found")
        return task

    async def _authorize_modify(self, task: Task, acting_user_id: uuid.UUID, verb: str) -> None:
        role = await self._role(task.board_id, acting_user_id)
        if role is None:
            raise PermissionDenied(f"access denied: must be a board member to {verb} task")
        if not can_modify_task(role, acting_user_id, task.created_by):
            raise PermissionDenied(f"access denied: only Admin or creator can {verb} task")

    async def create(
        self,
        acting_user_id: uuid.UUID,
        board_id: Optional[uuid.UUID],
        title: Optional[str],
        description: Optional[str] = None,
        assignee_id: Optional[uuid.UUID] = None,
        stage: Optional[str] = None,
    ) -> Task:
        """
        Create a task on a board. Admins and Members only.

        Raises:
            InvalidArgument: missing board_id/title or unknown stage
            PermissionDenied: caller is not a member, or is a Viewer
        """
        if board_id is None or not title:
            raise InvalidArgument("board_id and title are required")

        role = await self._role(board_id, acting_user_id)
        if role is None:
            raise PermissionDenied("access denied: must be a board member")
        if not is_allowed(role, BoardAction.CREATE_TASK):
            raise PermissionDenied("access denied: only Admins and Members can create tasks")

        task_stage = parse_stage(stage) if stage else TaskStage.TODO

        now = utc_now()
        task = Task(
            id=uuid.uuid4(),
            board_id=board_id,
            title=title,
            description=description or None,
            created_by=acting_user_id,
            assignee_id=assignee_id,
            stage=task_stage.value,
            created_at=now,
            updated_at=now,
        )
        self.session.add(task)
        await commit_or_raise(self.session, "failed to create task")

        logger.info(
            "Task created",
            extra={"task_id": str(task.id), "board_id": str(board_id)},
        )
        return task

    async def update(
        self,
        task_id: uuid.UUID,
        acting_user_id: uuid.UUID,
        title: Optional[str] = None,
        description: Optional[str] = None,
        assignee_id: Optional[uuid.UUID] = None,
        stage: Optional[str] = None,
    ) -> Task:
        """
        Merge the given fields into a task.

        Empty or absent fields keep their stored values.

        Raises:
            NotFound: task missing, or removed (e.g. by the board cascade)
                before the change was written
        """
        task = await self._load(task_id)
        await self._authorize_modify(task, acting_user_id, "update")

        new_stage = parse_stage(stage) if stage else None

        values = {"updated_at": utc_now()}
        if title:
            values["title"] = title
        if description:
            values["description"] = description
        if assignee_id is not None:
            values["assignee_id"] = assignee_id
        if new_stage is not None:
            values["stage"] = new_stage.value

        # The row may have been deleted since it was loaded
        try:
            result = await self.session.execute(
                update(Task).where(Task.id == task_id).values(**values)
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise Internal("failed to update task") from e
        if result.rowcount == 0:
            await self.session.rollback()
            raise NotFound("task not found")

        await commit_or_raise(self.session, "failed to update task")
        return task

    async def list_tasks(self, board_id: uuid.UUID, acting_user_id: uuid.UUID) -> List[Task]:
        """All tasks of a board in creation order. Any member may list."""
        role = await self._role(board_id, acting_user_id)
        if not is_allowed(role, BoardAction.LIST_TASKS):
            raise PermissionDenied("access denied: must be a board member to list tasks")

        query = select(Task).where(
            Task.board_id == board_id,
        ).order_by(Task.created_at, Task.id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def delete(self, task_id: uuid.UUID, acting_user_id: uuid.UUID) -> None:
        task = await self._load(task_id)
        await self._authorize_modify(task, acting_user_id, "delete")

        try:
            result = await self.session.execute(
                delete(Task).where(Task.id == task_id),
                execution_options={"synchronize_session": False},
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise Internal("failed to delete task") from e
        if result.rowcount == 0:
            await self.session.rollback()
            raise NotFound("task not found")

        await commit_or_raise(self.session, "failed to delete task")
        self.session.expunge(task)

        logger.info(
            "Task deleted",
            extra={"task_id": str(task_id), "board_id": str(task.board_id)},
        )
