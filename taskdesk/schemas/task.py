"""Task schemas: payload validation, list query parameters and API responses."""
from datetime import datetime
from enum import Enum
from math import ceil
from typing import Any, List, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from taskdesk.models.base import as_utc
from taskdesk.schemas.base import CamelModel


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class SortField(str, Enum):
    TITLE = "title"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    STATUS = "status"
    CREATED_AT = "createdAt"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class TaskFields(CamelModel):
    """Full set of owner-editable task fields.

    Validating this model is the single gate a task passes before it is
    written: on create directly, on update after merging the changes into the
    stored values.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    estimated_time: Optional[float] = Field(None, ge=0)  # minutes
    actual_time: Optional[float] = Field(None, ge=0)  # minutes

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_default(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, value: List[str]) -> List[str]:
        return [tag.strip() for tag in value if tag.strip()]

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class TaskCreate(TaskFields):
    """Schema for creating a task."""


class TaskUpdate(CamelModel):
    """Schema for a partial task update; only fields present in the body are applied."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None
    estimated_time: Optional[float] = Field(None, ge=0)
    actual_time: Optional[float] = Field(None, ge=0)


class TaskStatusUpdate(CamelModel):
    status: TaskStatus


# Largest OFFSET a signed 64-bit database integer holds
MAX_SKIP = 2 ** 63 - 1


class TaskQuery(CamelModel):
    """List parameters: filters, search, ordering and page window."""

    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    search: Optional[str] = None
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)

    @model_validator(mode="before")
    @classmethod
    def _drop_blank(cls, data: Any) -> Any:
        # Absent, null and empty-string parameters all mean "use the default"
        if not isinstance(data, dict):
            return data
        cleaned = {}
        for key, value in data.items():
            if value is None:
                continue
            if isinstance(value, str):
                value = value.strip()
                if not value:
                    continue
            cleaned[key] = value
        return cleaned

    @property
    def skip(self) -> int:
        # Pages past MAX_SKIP are empty either way
        return min((self.page - 1) * self.limit, MAX_SKIP)


class OwnerSummary(CamelModel):
    """Display fields of a task's owner; never credentials."""

    id: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class TaskResponse(CamelModel):
    """Schema for task API responses."""

    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    tags: List[str] = []
    is_completed: bool
    is_overdue: bool
    estimated_time: Optional[float] = None
    actual_time: Optional[float] = None
    owner: OwnerSummary
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_task(cls, task) -> "TaskResponse":
        owner = task.owner
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status,
            priority=task.priority,
            due_date=as_utc(task.due_date),
            completed_at=as_utc(task.completed_at),
            tags=task.tag_values,
            is_completed=task.is_completed,
            is_overdue=task.is_overdue,
            estimated_time=task.estimated_time,
            actual_time=task.actual_time,
            owner=OwnerSummary(
                id=owner.id,
                username=owner.username,
                first_name=owner.first_name,
                last_name=owner.last_name,
            ),
            created_at=as_utc(task.created_at),
            updated_at=as_utc(task.updated_at),
        )


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_tasks: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(
            current_page=page,
            total_pages=ceil(total / limit),
            total_tasks=total,
            has_next=page * limit < total,
            has_prev=page > 1,
        )


class TaskPage(CamelModel):
    tasks: List[TaskResponse]
    pagination: Pagination


class TaskEnvelope(CamelModel):
    task: TaskResponse


class TaskMessageEnvelope(CamelModel):
    message: str
    task: TaskResponse


class TaskStats(CamelModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    in_progress: int = 0
    cancelled: int = 0
    urgent: int = 0
    high: int = 0
    overdue: int = 0


class StatsEnvelope(CamelModel):
    stats: TaskStats


class MessageResponse(CamelModel):
    message: str
