"""Pydantic schemas for task lists and to-dos.

Learn: TaskListRead is what list endpoints return (cheap: no nested
users or to-dos). TaskListDetail is the single-list view used by the
to-do screen, with collaborators and items inlined.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from taskboard.schemas.auth import UserRead


# ─── Task lists ─────────────────────────────────────────

class TaskListCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)


class TaskListUpdate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)


class CollaboratorAdd(BaseModel):
    user_id: uuid.UUID


class TaskListRead(BaseModel):
    id: uuid.UUID
    title: str
    created_at: datetime
    progress: float
    user_ids: list[uuid.UUID]

    model_config = {"from_attributes": True}


class TaskListDetail(TaskListRead):
    """Task list with nested collaborators and to-dos."""
    users: list[UserRead] = []
    todos: list["ToDoRead"] = []


# ─── To-dos ─────────────────────────────────────────────

class ToDoCreate(BaseModel):
    content: str = Field(..., max_length=10_000)


class ToDoUpdate(BaseModel):
    """Partial update: only non-None fields are applied."""
    content: Optional[str] = Field(None, max_length=10_000)
    is_completed: Optional[bool] = None


class ToDoRead(BaseModel):
    id: uuid.UUID
    content: str
    is_completed: bool
    task_list_id: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class Deleted(BaseModel):
    deleted: bool = True


# Rebuild forward refs for nested models
TaskListDetail.model_rebuild()
