"""
Board deletion cascade into the task store.

The board store cannot reach the tasks table, so the task registry
subscribes to the board-deleted topic and removes the board's tasks itself.
"""

import uuid
from typing import Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.errors import Internal
from taskboard.kernel.events.event_types import BoardDeletedEvent
from taskboard.kernel.events.topic import Topic
from taskboard.kernel.tasks.task_registry import delete_tasks_for_board
from taskboard.logging_config import get_logger

logger = get_logger(__name__)

SUBSCRIPTION_NAME = "delete-tasks-on-board-deletion"


def make_board_deleted_handler(
    session_maker: async_sessionmaker[AsyncSession],
) -> Callable[[BoardDeletedEvent], Awaitable[None]]:
    """Handler that deletes every task of the deleted board. Safe to run twice."""

    async def delete_tasks_on_board_deletion(event: BoardDeletedEvent) -> None:
        board_id = uuid.UUID(event.board_id)
        try:
            async with session_maker() as session:
                deleted = await delete_tasks_for_board(session, board_id)
                await session.commit()
        except SQLAlchemyError as e:
            logger.exception("Task cascade failed", extra={"board_id": event.board_id})
            raise Internal("failed to delete tasks for board") from e

        logger.info(
            "Tasks removed for deleted board",
            extra={"board_id": event.board_id, "deleted": deleted},
        )

    return delete_tasks_on_board_deletion


def register_task_subscriptions(
    topic: Topic[BoardDeletedEvent],
    session_maker: async_sessionmaker[AsyncSession],
) -> None:
    topic.subscribe(SUBSCRIPTION_NAME, make_board_deleted_handler(session_maker))
