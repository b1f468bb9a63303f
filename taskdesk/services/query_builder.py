"""
Task query builder.

Turns list parameters into a selection (filter clauses), an ordering and a
skip/limit window over the task table. The owner clause is always present
and cannot be overridden by any parameter.
"""
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from sqlalchemy import asc, desc, func, or_
from sqlalchemy.orm import selectinload
from sqlmodel import select

from taskdesk.models.task import Task, TaskTag
from taskdesk.schemas.base import validate_payload
from taskdesk.schemas.task import SortField, SortOrder, TaskQuery

SORT_COLUMNS = {
    SortField.TITLE: Task.title,
    SortField.DUE_DATE: Task.due_date,
    SortField.PRIORITY: Task.priority,
    SortField.STATUS: Task.status,
    SortField.CREATED_AT: Task.created_at,
}

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the search term matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass(frozen=True)
class TaskSelection:
    """A validated list request for one owner."""

    owner_id: str
    query: TaskQuery
    conditions: Tuple[Any, ...]
    order_by: Tuple[Any, ...]

    @property
    def page(self) -> int:
        return self.query.page

    @property
    def limit(self) -> int:
        return self.query.limit

    @property
    def skip(self) -> int:
        return self.query.skip

    def page_statement(self):
        return (
            select(Task)
            .where(*self.conditions)
            .options(selectinload(Task.owner))
            .order_by(*self.order_by)
            .offset(self.skip)
            .limit(self.limit)
        )

    def count_statement(self):
        return select(func.count(Task.id)).where(*self.conditions)


def search_clause(term: str):
    """Case-insensitive containment over title, description or any tag."""
    pattern = f"%{escape_like(term)}%"
    tagged = select(TaskTag.task_id).where(TaskTag.value.ilike(pattern, escape=LIKE_ESCAPE))
    return or_(
        Task.title.ilike(pattern, escape=LIKE_ESCAPE),
        Task.description.ilike(pattern, escape=LIKE_ESCAPE),
        Task.id.in_(tagged),
    )


def build_task_query(owner_id: str, params: Optional[Mapping[str, Any]] = None) -> TaskSelection:
    """
    Build the selection, ordering and page window for a list request.

    Args:
        owner_id: The authenticated requester; always narrows the selection
        params: status, priority, search, sortBy, sortOrder, page, limit
            (camelCase or snake_case keys, strings or native values)

    Returns:
        TaskSelection ready to produce the page and count statements

    Raises:
        ValidationError: listing every unrecognised or out-of-range parameter
    """
    query = validate_payload(TaskQuery, params or {})

    conditions = [Task.owner_id == owner_id]
    if query.status is not None:
        conditions.append(Task.status == query.status.value)
    if query.priority is not None:
        conditions.append(Task.priority == query.priority.value)
    if query.search:
        conditions.append(search_clause(query.search))

    # Labels sort lexically; the id tiebreak keeps pages stable
    direction = asc if query.sort_order is SortOrder.ASC else desc
    order_by = (direction(SORT_COLUMNS[query.sort_by]), direction(Task.id))

    return TaskSelection(
        owner_id=owner_id,
        query=query,
        conditions=tuple(conditions),
        order_by=order_by,
    )
