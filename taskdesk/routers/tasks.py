"""Task router: CRUD, status changes, listing and statistics."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from taskdesk.db.config import get_session
from taskdesk.middleware.auth import CurrentUser, get_current_user
from taskdesk.schemas.task import (
    MessageResponse,
    StatsEnvelope,
    TaskCreate,
    TaskEnvelope,
    TaskMessageEnvelope,
    TaskPage,
    TaskResponse,
    TaskStatusUpdate,
    TaskUpdate,
)
from taskdesk.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def get_task_service(
    current_user: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> TaskService:
    """Dependency for a TaskService scoped to the authenticated user."""
    return TaskService(session, current_user.user_id)


@router.get("", response_model=TaskPage)
def list_tasks(
    service: TaskService = Depends(get_task_service),
    status_filter: Optional[str] = Query(None, alias="status", description="pending, in-progress, completed, cancelled"),
    priority: Optional[str] = Query(None, description="low, medium, high, urgent"),
    search: Optional[str] = Query(None, description="Case-insensitive match on title, description or tags"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="title, dueDate, priority, status, createdAt"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc or desc"),
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    limit: Optional[str] = Query(None, description="Page size, 1 to 100"),
):
    """List the user's tasks with filtering, search, sorting and pagination."""
    # Parameters are validated together by the query builder
    return service.list_tasks({
        "status": status_filter,
        "priority": priority,
        "search": search,
        "sort_by": sort_by,
        "sort_order": sort_order,
        "page": page,
        "limit": limit,
    })


@router.post("", response_model=TaskMessageEnvelope, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    service: TaskService = Depends(get_task_service),
):
    task = service.create(task_data)
    return TaskMessageEnvelope(message="Task created successfully", task=TaskResponse.from_task(task))


@router.get("/stats", response_model=StatsEnvelope)
def get_stats(service: TaskService = Depends(get_task_service)):
    """Counters by status, high/urgent priority and overdue."""
    return StatsEnvelope(stats=service.stats())


@router.get("/stats/overview", response_model=StatsEnvelope, include_in_schema=False)
def get_stats_overview(service: TaskService = Depends(get_task_service)):
    return StatsEnvelope(stats=service.stats())


@router.get("/{task_id}", response_model=TaskEnvelope)
def get_task(task_id: str, service: TaskService = Depends(get_task_service)):
    return TaskEnvelope(task=TaskResponse.from_task(service.get(task_id)))


@router.put("/{task_id}", response_model=TaskMessageEnvelope)
def update_task(
    task_id: str,
    task_data: TaskUpdate,
    service: TaskService = Depends(get_task_service),
):
    """Partially update a task; fields left out of the body keep their values."""
    task = service.update(task_id, task_data)
    return TaskMessageEnvelope(message="Task updated successfully", task=TaskResponse.from_task(task))


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(task_id: str, service: TaskService = Depends(get_task_service)):
    service.delete(task_id)
    return MessageResponse(message="Task deleted successfully")


@router.patch("/{task_id}/status", response_model=TaskMessageEnvelope)
def update_status(
    task_id: str,
    body: TaskStatusUpdate,
    service: TaskService = Depends(get_task_service),
):
    task = service.set_status(task_id, body.status)
    return TaskMessageEnvelope(message="Task status updated successfully", task=TaskResponse.from_task(task))


@router.patch("/{task_id}/complete", response_model=TaskMessageEnvelope)
def complete_task(task_id: str, service: TaskService = Depends(get_task_service)):
    task = service.complete(task_id)
    return TaskMessageEnvelope(message="Task marked as completed", task=TaskResponse.from_task(task))
