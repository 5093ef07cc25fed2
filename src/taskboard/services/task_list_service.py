"""Task list service: collaborator-scoped CRUD over task lists.

Learn: This is the access-control core. The rule is uniform:

    a task list, and every to-do in it, is visible and mutable
    only by the users in its collaborator set.

Every operation that targets an existing list goes through
get_for_collaborator(), which distinguishes "no such list" (NotFound)
from "not yours" (NotCollaborator). The creator is the first
collaborator; collaborators are only ever added, never removed.

Adding a collaborator is one conflict-ignoring INSERT against the
(task_list_id, user_id) unique constraint. Two concurrent adds of the
same user cannot produce a duplicate, and adds of different users
cannot overwrite each other.
"""

import uuid

import structlog
from sqlalchemy import case, delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskboard.db.engine import SUPPORTED_DIALECTS
from taskboard.db.models import Collaborator, TaskList, ToDo, User, utcnow
from taskboard.errors import NotCollaborator, NotFound

logger = structlog.get_logger()


def compute_progress(todos: list[ToDo]) -> float:
    """Fraction of completed to-dos, 0.0 for an empty list."""
    if not todos:
        return 0.0
    done = sum(1 for t in todos if t.is_completed)
    return done / len(todos)


class TaskListService:
    """Business logic for task lists and their collaborators."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Queries ────────────────────────────────────────

    async def list_for_user(self, user: User) -> list[TaskList]:
        """All task lists the user collaborates on, newest first."""
        member_of = select(Collaborator.task_list_id).where(
            Collaborator.user_id == user.id
        )
        result = await self.db.execute(
            select(TaskList)
            .where(TaskList.id.in_(member_of))
            .options(selectinload(TaskList.collaborators))
            .order_by(TaskList.created_at.desc())
        )
        task_lists = list(result.scalars().all())
        await self._attach_progress(task_lists)
        return task_lists

    async def get_for_collaborator(
        self, task_list_id: uuid.UUID, user: User
    ) -> TaskList:
        """Load a task list with users and to-dos, checking membership.

        Raises NotFound if the list does not exist and NotCollaborator
        if the user is not in its collaborator set.
        """
        result = await self.db.execute(
            select(TaskList)
            .where(TaskList.id == task_list_id)
            .options(
                selectinload(TaskList.collaborators).selectinload(Collaborator.user),
                selectinload(TaskList.todos),
            )
            .execution_options(populate_existing=True)
        )
        task_list = result.scalars().first()
        if task_list is None:
            raise NotFound("Task list not found")
        if not task_list.has_collaborator(user.id):
            logger.info(
                "task_list.access_denied",
                task_list_id=str(task_list_id),
                user_id=str(user.id),
            )
            raise NotCollaborator()

        task_list.progress = compute_progress(task_list.todos)
        return task_list

    # ─── Mutations ──────────────────────────────────────

    async def create(self, user: User, title: str) -> TaskList:
        """Create a task list with the creator as its sole collaborator."""
        task_list = TaskList(
            title=title,
            collaborators=[Collaborator(user=user)],
            todos=[],
        )
        self.db.add(task_list)
        await self.db.commit()

        logger.info(
            "task_list.created", task_list_id=str(task_list.id), user_id=str(user.id)
        )
        return task_list

    async def update_title(
        self, task_list_id: uuid.UUID, user: User, title: str
    ) -> TaskList:
        task_list = await self.get_for_collaborator(task_list_id, user)
        task_list.title = title
        await self.db.commit()

        logger.info("task_list.updated", task_list_id=str(task_list_id))
        return task_list

    async def add_collaborator(
        self, task_list_id: uuid.UUID, user: User, new_user_id: uuid.UUID
    ) -> TaskList:
        """Add new_user_id to the list's collaborators. Idempotent.

        The acting user must already be a collaborator, and the target
        user must exist.
        """
        await self.get_for_collaborator(task_list_id, user)

        if await self.db.get(User, new_user_id) is None:
            raise NotFound("User not found")

        stmt = self._insert_ignoring_conflicts().values(
            id=uuid.uuid4(),
            task_list_id=task_list_id,
            user_id=new_user_id,
            added_at=utcnow(),
        )
        result = await self.db.execute(stmt)
        await self.db.commit()

        if result.rowcount:
            logger.info(
                "task_list.collaborator_added",
                task_list_id=str(task_list_id),
                added_user_id=str(new_user_id),
            )
        return await self.get_for_collaborator(task_list_id, user)

    async def delete(self, task_list_id: uuid.UUID, user: User) -> None:
        """Delete a task list together with its to-dos and memberships."""
        await self.get_for_collaborator(task_list_id, user)

        await self.db.execute(delete(ToDo).where(ToDo.task_list_id == task_list_id))
        await self.db.execute(
            delete(Collaborator).where(Collaborator.task_list_id == task_list_id)
        )
        await self.db.execute(delete(TaskList).where(TaskList.id == task_list_id))
        await self.db.commit()

        logger.info("task_list.deleted", task_list_id=str(task_list_id))

    # ─── Helpers ────────────────────────────────────────

    def _insert_ignoring_conflicts(self):
        """INSERT ... ON CONFLICT DO NOTHING for the current dialect."""
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(Collaborator.__table__).on_conflict_do_nothing(
                constraint="uq_task_list_collaborators"
            )
        if dialect == "sqlite":
            return sqlite.insert(Collaborator.__table__).on_conflict_do_nothing(
                index_elements=["task_list_id", "user_id"]
            )
        raise ValueError(
            f"Unsupported database dialect '{dialect}'; "
            f"expected one of: {', '.join(SUPPORTED_DIALECTS)}"
        )

    async def _attach_progress(self, task_lists: list[TaskList]) -> None:
        """Set .progress on each list with one aggregate query."""
        if not task_lists:
            return
        ids = [tl.id for tl in task_lists]
        result = await self.db.execute(
            select(
                ToDo.task_list_id,
                func.count(ToDo.id),
                func.sum(case((ToDo.is_completed.is_(True), 1), else_=0)),
            )
            .where(ToDo.task_list_id.in_(ids))
            .group_by(ToDo.task_list_id)
        )
        counts = {row[0]: (row[1], row[2] or 0) for row in result.all()}
        for tl in task_lists:
            total, done = counts.get(tl.id, (0, 0))
            tl.progress = done / total if total else 0.0
