"""Task service: the task operations available to one authenticated user."""
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional, Union
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from taskdesk.errors import InternalError, NotFound
from taskdesk.models.task import Task
from taskdesk.schemas.base import validate_payload
from taskdesk.schemas.task import (
    Pagination,
    TaskCreate,
    TaskFields,
    TaskPage,
    TaskResponse,
    TaskStats,
    TaskStatus,
    TaskStatusUpdate,
    TaskUpdate,
)
from taskdesk.services.query_builder import build_task_query
from taskdesk.services.stats import compute_task_stats

logger = logging.getLogger(__name__)

Payload = Union[Mapping[str, Any], TaskFields, TaskUpdate]


class TaskService:
    """Task CRUD, status changes, listing and statistics scoped to one owner.

    Every lookup filters on the owner, so a task that belongs to someone else
    behaves exactly like one that does not exist.
    """

    def __init__(self, session: Session, owner_id: str):
        self.session = session
        self.owner_id = owner_id

    @contextmanager
    def _persisting(self, action: str) -> Iterator[None]:
        """Translate unexpected database failures into a generic InternalError."""
        try:
            yield
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Database error while %s for user %s", action, self.owner_id)
            raise InternalError(f"Server error while {action}") from None

    def _get_owned(self, task_id: str) -> Task:
        statement = (
            select(Task)
            .where(Task.id == task_id)
            .where(Task.owner_id == self.owner_id)
        )
        with self._persisting("fetching task"):
            task = self.session.exec(statement).first()
        if task is None:
            logger.warning("Task %s not found for user %s", task_id, self.owner_id)
            raise NotFound()
        return task

    @staticmethod
    def _current_fields(task: Task) -> Dict[str, Any]:
        return {
            "title": task.title,
            "description": task.description,
            "status": task.status,
            "priority": task.priority,
            "due_date": task.due_date,
            "tags": task.tag_values,
            "estimated_time": task.estimated_time,
            "actual_time": task.actual_time,
        }

    @staticmethod
    def _assign(task: Task, fields: TaskFields) -> None:
        task.title = fields.title
        task.description = fields.description
        task.priority = fields.priority.value
        task.due_date = fields.due_date
        task.estimated_time = fields.estimated_time
        task.actual_time = fields.actual_time
        if list(fields.tags) != task.tag_values:
            task.set_tags(fields.tags)
        task.apply_status(fields.status.value)
        task.touch()

    def _save(self, task: Task, action: str) -> Task:
        with self._persisting(action):
            self.session.add(task)
            self.session.commit()
            self.session.refresh(task)
        return task

    def list_tasks(self, params: Optional[Mapping[str, Any]] = None) -> TaskPage:
        """Return one page of the owner's tasks plus the pagination summary.

        The page and the total are two separate queries; under concurrent
        writes they may briefly disagree.
        """
        selection = build_task_query(self.owner_id, params)
        with self._persisting("fetching tasks"):
            tasks = list(self.session.exec(selection.page_statement()).all())
            total = self.session.exec(selection.count_statement()).one()

        return TaskPage(
            tasks=[TaskResponse.from_task(task) for task in tasks],
            pagination=Pagination.build(selection.page, selection.limit, total),
        )

    def get(self, task_id: str) -> Task:
        return self._get_owned(task_id)

    def create(self, payload: Payload) -> Task:
        """Validate ``payload`` and store it as a new task owned by the requester."""
        fields = validate_payload(TaskCreate, payload)
        task = Task(owner_id=self.owner_id, title=fields.title)
        self._assign(task, fields)
        self._save(task, "creating task")
        logger.info("Created task %s for user %s", task.id, self.owner_id)
        return task

    def update(self, task_id: str, payload: Payload) -> Task:
        """Apply the fields present in ``payload``.

        The changes are merged into the stored values and the result is
        validated as a whole before anything is written.
        """
        changes = validate_payload(TaskUpdate, payload).model_dump(exclude_unset=True)
        task = self._get_owned(task_id)

        merged = self._current_fields(task)
        merged.update(changes)
        fields = validate_payload(TaskFields, merged)

        self._assign(task, fields)
        self._save(task, "updating task")
        logger.info("Updated task %s (%s)", task.id, ", ".join(sorted(changes)) or "no changes")
        return task

    def delete(self, task_id: str) -> None:
        task = self._get_owned(task_id)
        with self._persisting("deleting task"):
            self.session.delete(task)
            self.session.commit()
        logger.info("Deleted task %s for user %s", task_id, self.owner_id)

    def set_status(self, task_id: str, status: Union[str, TaskStatus]) -> Task:
        new_status = validate_payload(TaskStatusUpdate, {"status": status}).status
        task = self._get_owned(task_id)
        task.apply_status(new_status.value)
        task.touch()
        self._save(task, "updating task status")
        logger.info("Task %s status set to %s", task.id, new_status.value)
        return task

    def complete(self, task_id: str) -> Task:
        return self.set_status(task_id, TaskStatus.COMPLETED)

    def stats(self) -> TaskStats:
        with self._persisting("fetching statistics"):
            return compute_task_stats(self.session, self.owner_id)
