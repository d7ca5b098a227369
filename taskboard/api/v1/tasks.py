"""
Task endpoints.
"""

import uuid

from fastapi import APIRouter, status

from taskboard.api.deps import CurrentUserId, Membership, TaskDb
from taskboard.kernel.tasks.task_registry import TaskRegistry
from taskboard.schemas.common import MessageResponse
from taskboard.schemas.task import TaskCreate, TaskListResponse, TaskResponse, TaskUpdate

router = APIRouter()


@router.post("/task", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(data: TaskCreate, user_id: CurrentUserId, db: TaskDb, membership: Membership):
    """Create a task. Admins and Members only."""
    registry = TaskRegistry(db, membership)
    task = await registry.create(
        user_id,
        board_id=data.board_id,
        title=data.title,
        description=data.description,
        assignee_id=data.assignee_id,
        stage=data.stage,
    )
    return TaskResponse.model_validate(task)


@router.put("/task/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: uuid.UUID,
    data: TaskUpdate,
    user_id: CurrentUserId,
    db: TaskDb,
    membership: Membership,
):
    """Update a task. Admins any task, Members their own."""
    registry = TaskRegistry(db, membership)
    task = await registry.update(
        task_id,
        user_id,
        title=data.title,
        description=data.description,
        assignee_id=data.assignee_id,
        stage=data.stage,
    )
    return TaskResponse.model_validate(task)


@router.get("/board/{board_id}/tasks", response_model=TaskListResponse)
async def list_tasks(board_id: uuid.UUID, user_id: CurrentUserId, db: TaskDb, membership: Membership):
    registry = TaskRegistry(db, membership)
    tasks = await registry.list_tasks(board_id, user_id)
    return TaskListResponse(tasks=[TaskResponse.model_validate(task) for task in tasks])


@router.delete("/task/{task_id}", response_model=MessageResponse)
async def delete_task(task_id: uuid.UUID, user_id: CurrentUserId, db: TaskDb, membership: Membership):
    registry = TaskRegistry(db, membership)
    await registry.delete(task_id, user_id)
    return MessageResponse(message="Task deleted successfully")
