"""Per-user task statistics computed in a single aggregate query."""
from datetime import datetime
from typing import Optional

from sqlalchemy import and_, case, func
from sqlmodel import Session, select

from taskdesk.models.base import utcnow
from taskdesk.models.task import Task
from taskdesk.schemas.task import TaskPriority, TaskStats, TaskStatus


def _count_when(condition):
    # SUM over zero rows is NULL
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def compute_task_stats(session: Session, owner_id: str, now: Optional[datetime] = None) -> TaskStats:
    """Count the owner's tasks by status, high/urgent priority and overdue.

    Always returns every counter; an owner without tasks gets all zeros.
    """
    now = now or utcnow()
    statement = select(
        func.count(Task.id).label("total"),
        _count_when(Task.status == TaskStatus.COMPLETED.value).label("completed"),
        _count_when(Task.status == TaskStatus.PENDING.value).label("pending"),
        _count_when(Task.status == TaskStatus.IN_PROGRESS.value).label("in_progress"),
        _count_when(Task.status == TaskStatus.CANCELLED.value).label("cancelled"),
        _count_when(Task.priority == TaskPriority.URGENT.value).label("urgent"),
        _count_when(Task.priority == TaskPriority.HIGH.value).label("high"),
        _count_when(
            and_(
                Task.status != TaskStatus.COMPLETED.value,
                Task.due_date.is_not(None),
                Task.due_date < now,
            )
        ).label("overdue"),
    ).where(Task.owner_id == owner_id)

    row = session.exec(statement).one()
    return TaskStats(**{key: int(value or 0) for key, value in row._mapping.items()})
