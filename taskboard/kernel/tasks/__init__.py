"""Board tasks."""

from taskboard.kernel.tasks.task_registry import TaskRegistry, delete_tasks_for_board, parse_stage
from taskboard.kernel.tasks.cascade import (
    SUBSCRIPTION_NAME,
    make_board_deleted_handler,
    register_task_subscriptions,
)

__all__ = [
    "TaskRegistry",
    "delete_tasks_for_board",
    "parse_stage",
    "SUBSCRIPTION_NAME",
    "make_board_deleted_handler",
    "register_task_subscriptions",
]
