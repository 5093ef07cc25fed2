"""To-do API routes.

Learn: Items are addressed by their own id for edits and deletes; the
service looks up the parent list and applies its collaborator check.
Creation lives under /task-lists/{id}/todos.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import get_current_user
from taskboard.db.engine import get_db
from taskboard.db.models import User
from taskboard.schemas.task_list import Deleted, ToDoRead, ToDoUpdate
from taskboard.services.todo_service import ToDoService

router = APIRouter(prefix="/todos")


def _svc(db: AsyncSession = Depends(get_db)) -> ToDoService:
    return ToDoService(db)


@router.patch("/{todo_id}", response_model=ToDoRead)
async def update_todo(
    todo_id: uuid.UUID,
    body: ToDoUpdate,
    user: User = Depends(get_current_user),
    svc: ToDoService = Depends(_svc),
):
    """Edit content and/or toggle completion."""
    return await svc.update(
        todo_id,
        user,
        content=body.content,
        is_completed=body.is_completed,
    )


@router.delete("/{todo_id}", response_model=Deleted)
async def delete_todo(
    todo_id: uuid.UUID,
    user: User = Depends(get_current_user),
    svc: ToDoService = Depends(_svc),
):
    await svc.delete(todo_id, user)
    return Deleted()
