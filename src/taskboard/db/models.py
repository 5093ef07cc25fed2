"""SQLAlchemy ORM models: the single source of truth for the schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style
(Mapped[] + mapped_column). Each class = one table.

Key concepts:
- UUID primary keys, assigned on insert. One canonical `id` everywhere.
- Collaborators are rows in their own table with a unique
  (task_list_id, user_id) constraint. "Add if absent" is then a single
  conflict-ignoring INSERT instead of read-check-write.
- Portable column types (Uuid, DateTime(timezone=True)) so the same
  models run on PostgreSQL in production and SQLite in tests.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class User(Base):
    """A person who signs in and collaborates on task lists.

    Created on sign-up, never mutated or deleted by the API.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class TaskList(Base):
    """A titled list of to-dos, shared by its collaborators.

    Learn: `progress` is not a column. It is derived from the to-dos
    (completed / total) by TaskListService and attached to the instance
    before it is serialized.
    """

    __tablename__ = "task_lists"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    collaborators: Mapped[list["Collaborator"]] = relationship(
        back_populates="task_list",
        order_by="Collaborator.added_at",
    )
    todos: Mapped[list["ToDo"]] = relationship(
        back_populates="task_list",
        order_by="ToDo.created_at",
    )

    progress = 0.0

    @property
    def user_ids(self) -> list[uuid.UUID]:
        """Collaborator ids, creator first."""
        return [c.user_id for c in self.collaborators]

    @property
    def users(self) -> list[User]:
        return [c.user for c in self.collaborators]

    def has_collaborator(self, user_id: uuid.UUID) -> bool:
        return user_id in self.user_ids


class Collaborator(Base):
    """Membership of a user in a task list's authorized set."""

    __tablename__ = "task_list_collaborators"
    __table_args__ = (
        UniqueConstraint("task_list_id", "user_id", name="uq_task_list_collaborators"),
        Index("ix_task_list_collaborators_user_id", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    task_list_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("task_lists.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    task_list: Mapped["TaskList"] = relationship(back_populates="collaborators")
    user: Mapped["User"] = relationship()


class ToDo(Base):
    """A checkable item in a task list.

    Holds a plain reference to its task list; the list finds its to-dos
    by querying on task_list_id.
    """

    __tablename__ = "todos"
    __table_args__ = (
        Index("ix_todos_task_list_id", "task_list_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    task_list_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("task_lists.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    task_list: Mapped["TaskList"] = relationship(back_populates="todos")
