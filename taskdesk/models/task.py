"""Task model for SQLModel."""
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, ForeignKey, Index, String
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, List, Optional

from taskdesk.models.base import UTCDateTime, as_utc, new_id, utcnow

if TYPE_CHECKING:
    from taskdesk.models.user import User

COMPLETED = "completed"


class Task(SQLModel, table=True):
    """Task entity: one unit of work owned by exactly one user.

    ``is_completed`` and ``completed_at`` are derived from ``status`` and are
    only ever written through :meth:`apply_status`.
    """

    __table_args__ = (
        Index("ix_task_owner_status", "owner_id", "status"),
        Index("ix_task_owner_due_date", "owner_id", "due_date"),
        Index("ix_task_owner_priority", "owner_id", "priority"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    owner_id: str = Field(
        sa_column=Column(String, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    title: str = Field(max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    status: str = Field(default="pending", max_length=20)
    priority: str = Field(default="medium", max_length=20)
    due_date: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    completed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    is_completed: bool = Field(default=False)
    estimated_time: Optional[float] = Field(default=None)  # minutes
    actual_time: Optional[float] = Field(default=None)  # minutes
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    # Relationships
    owner: "User" = Relationship(back_populates="tasks")
    tag_links: List["TaskTag"] = Relationship(
        back_populates="task",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "TaskTag.position",
            "lazy": "selectin",
        },
    )

    @property
    def tag_values(self) -> List[str]:
        """Tags in insertion order."""
        return [link.value for link in self.tag_links]

    def set_tags(self, values: Iterable[str]) -> None:
        self.tag_links = [TaskTag(position=i, value=value) for i, value in enumerate(values)]

    @property
    def is_overdue(self) -> bool:
        """True when a due date is set, the task is open and the due date has passed."""
        return self.overdue_at(utcnow())

    def overdue_at(self, now: datetime) -> bool:
        if self.due_date is None or self.is_completed:
            return False
        return as_utc(self.due_date) < as_utc(now)

    def apply_status(self, status: str, now: Optional[datetime] = None) -> None:
        """Set ``status`` and keep the completion fields in step with it."""
        if status == COMPLETED:
            # Re-applying "completed" keeps the original completion time
            if self.status != COMPLETED or self.completed_at is None:
                self.completed_at = now or utcnow()
            self.is_completed = True
        else:
            self.is_completed = False
            self.completed_at = None
        self.status = status

    def touch(self) -> None:
        self.updated_at = utcnow()


class TaskTag(SQLModel, table=True):
    """One tag of a task; ``position`` preserves the order the owner entered."""

    id: Optional[int] = Field(default=None, primary_key=True)
    task_id: str = Field(
        sa_column=Column(String, ForeignKey("task.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    position: int = Field(default=0)
    value: str

    task: Optional[Task] = Relationship(back_populates="tag_links")
