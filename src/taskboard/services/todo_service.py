"""To-do service: items inside a task list.

Learn: A to-do has no access rules of its own. It inherits them from its
task list: whoever collaborates on the list may add, edit, check off,
or remove its items. Every operation therefore resolves the parent list
through TaskListService.get_for_collaborator first.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.db.models import ToDo, User
from taskboard.errors import NotFound
from taskboard.services.task_list_service import TaskListService

logger = structlog.get_logger()


class ToDoService:
    """Business logic for to-do items."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.task_lists = TaskListService(db)

    async def create(
        self, task_list_id: uuid.UUID, user: User, content: str
    ) -> ToDo:
        """Create an incomplete to-do at the end of the list."""
        await self.task_lists.get_for_collaborator(task_list_id, user)

        todo = ToDo(content=content, task_list_id=task_list_id, is_completed=False)
        self.db.add(todo)
        await self.db.commit()

        logger.info(
            "todo.created", todo_id=str(todo.id), task_list_id=str(task_list_id)
        )
        return todo

    async def update(
        self,
        todo_id: uuid.UUID,
        user: User,
        content: Optional[str] = None,
        is_completed: Optional[bool] = None,
    ) -> ToDo:
        """Partially update a to-do. Only non-None fields are applied."""
        todo = await self._get_for_collaborator(todo_id, user)

        if content is not None:
            todo.content = content
        if is_completed is not None:
            todo.is_completed = is_completed
        await self.db.commit()

        logger.info("todo.updated", todo_id=str(todo_id))
        return todo

    async def delete(self, todo_id: uuid.UUID, user: User) -> None:
        await self._get_for_collaborator(todo_id, user)
        await self.db.execute(delete(ToDo).where(ToDo.id == todo_id))
        await self.db.commit()

        logger.info("todo.deleted", todo_id=str(todo_id))

    async def _get_for_collaborator(self, todo_id: uuid.UUID, user: User) -> ToDo:
        result = await self.db.execute(select(ToDo).where(ToDo.id == todo_id))
        todo = result.scalars().first()
        if todo is None:
            raise NotFound("To-do not found")
        await self.task_lists.get_for_collaborator(todo.task_list_id, user)
        return todo
