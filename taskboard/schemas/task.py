"""
Task schemas.

Stage is validated by the task registry so that an unknown value produces
the same error for create and update.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class TaskCreate(BaseModel):
    board_id: Optional[uuid.UUID] = None
    title: str = ""
    description: Optional[str] = None
    assignee_id: Optional[uuid.UUID] = None
    stage: Optional[str] = None


class TaskUpdate(BaseModel):
    """Partial update. Empty or absent fields keep their stored values."""

    title: Optional[str] = None
    description: Optional[str] = None
    assignee_id: Optional[uuid.UUID] = None
    stage: Optional[str] = None


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    board_id: uuid.UUID
    title: str
    description: Optional[str] = None
    created_by: uuid.UUID
    assignee_id: Optional[uuid.UUID] = None
    stage: str
    created_at: datetime
    updated_at: datetime


class TaskListResponse(BaseModel):
    tasks: List[TaskResponse]
