"""Task list API routes.

Learn: Routes translate HTTP to service calls and nothing more. The
collaborator check, NotFound vs NotCollaborator, and the atomic
collaborator insert all live in TaskListService.

- GET    /task-lists              → lists I collaborate on
- POST   /task-lists              → create (I become sole collaborator)
- GET    /task-lists/{id}         → detail with users, to-dos, progress
- PATCH  /task-lists/{id}         → rename
- DELETE /task-lists/{id}         → delete with its to-dos
- POST   /task-lists/{id}/users   → add a collaborator (idempotent)
- POST   /task-lists/{id}/todos   → add a to-do
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import get_current_user
from taskboard.db.engine import get_db
from taskboard.db.models import User
from taskboard.schemas.task_list import (
    CollaboratorAdd,
    Deleted,
    TaskListCreate,
    TaskListDetail,
    TaskListRead,
    TaskListUpdate,
    ToDoCreate,
    ToDoRead,
)
from taskboard.services.task_list_service import TaskListService
from taskboard.services.todo_service import ToDoService

router = APIRouter(prefix="/task-lists")


def _svc(db: AsyncSession = Depends(get_db)) -> TaskListService:
    return TaskListService(db)


def _todo_svc(db: AsyncSession = Depends(get_db)) -> ToDoService:
    return ToDoService(db)


# ─── Task lists ─────────────────────────────────────────

@router.get("", response_model=list[TaskListRead])
async def my_task_lists(
    user: User = Depends(get_current_user),
    svc: TaskListService = Depends(_svc),
):
    return await svc.list_for_user(user)


@router.post("", response_model=TaskListRead, status_code=201)
async def create_task_list(
    body: TaskListCreate,
    user: User = Depends(get_current_user),
    svc: TaskListService = Depends(_svc),
):
    return await svc.create(user, title=body.title)


@router.get("/{task_list_id}", response_model=TaskListDetail)
async def get_task_list(
    task_list_id: uuid.UUID,
    user: User = Depends(get_current_user),
    svc: TaskListService = Depends(_svc),
):
    return await svc.get_for_collaborator(task_list_id, user)


@router.patch("/{task_list_id}", response_model=TaskListRead)
async def update_task_list(
    task_list_id: uuid.UUID,
    body: TaskListUpdate,
    user: User = Depends(get_current_user),
    svc: TaskListService = Depends(_svc),
):
    return await svc.update_title(task_list_id, user, title=body.title)


@router.delete("/{task_list_id}", response_model=Deleted)
async def delete_task_list(
    task_list_id: uuid.UUID,
    user: User = Depends(get_current_user),
    svc: TaskListService = Depends(_svc),
):
    await svc.delete(task_list_id, user)
    return Deleted()


# ─── Collaborators ──────────────────────────────────────

@router.post("/{task_list_id}/users", response_model=TaskListDetail)
async def add_user_to_task_list(
    task_list_id: uuid.UUID,
    body: CollaboratorAdd,
    user: User = Depends(get_current_user),
    svc: TaskListService = Depends(_svc),
):
    """Add a collaborator. Adding an existing collaborator is a no-op."""
    return await svc.add_collaborator(task_list_id, user, body.user_id)


# ─── To-dos ─────────────────────────────────────────────

@router.post("/{task_list_id}/todos", response_model=ToDoRead, status_code=201)
async def create_todo(
    task_list_id: uuid.UUID,
    body: ToDoCreate,
    user: User = Depends(get_current_user),
    svc: ToDoService = Depends(_todo_svc),
):
    return await svc.create(task_list_id, user, content=body.content)
