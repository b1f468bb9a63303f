"""
Task list view state.

``TaskViewState`` is an immutable snapshot; ``reduce`` returns a new snapshot
for each action and never mutates the one it is given. Nested mappings use the
API's camelCase keys so pagination payloads can be merged as received.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

DEFAULT_PAGE_SIZE = 20


def _frozen(values: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(values))


class ActionType(str, Enum):
    SET_TASKS = "SET_TASKS"
    ADD_TASK = "ADD_TASK"
    UPDATE_TASK = "UPDATE_TASK"
    DELETE_TASK = "DELETE_TASK"
    SET_FILTERS = "SET_FILTERS"
    SET_SORT = "SET_SORT"
    SET_SEARCH = "SET_SEARCH"
    SET_PAGINATION = "SET_PAGINATION"


@dataclass(frozen=True)
class Action:
    type: ActionType
    payload: Any = None


@dataclass(frozen=True)
class TaskViewState:
    tasks: Tuple[Mapping[str, Any], ...] = ()
    filters: Mapping[str, Any] = field(
        default_factory=lambda: _frozen({"status": "", "priority": ""})
    )
    sort: Mapping[str, Any] = field(
        default_factory=lambda: _frozen({"sortBy": "createdAt", "sortOrder": "desc"})
    )
    search: str = ""
    pagination: Mapping[str, Any] = field(
        default_factory=lambda: _frozen({
            "currentPage": 1,
            "totalPages": 1,
            "totalTasks": 0,
            "hasNext": False,
            "hasPrev": False,
        })
    )

    def query_params(self, limit: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
        """Parameters for ``GET /api/tasks``; empty filters and search are left out."""
        params: Dict[str, Any] = {}
        if self.filters.get("status"):
            params["status"] = self.filters["status"]
        if self.filters.get("priority"):
            params["priority"] = self.filters["priority"]
        params["sortBy"] = self.sort["sortBy"]
        params["sortOrder"] = self.sort["sortOrder"]
        if self.search:
            params["search"] = self.search
        params["page"] = self.pagination["currentPage"]
        params["limit"] = limit
        return params


def _merge(current: Mapping[str, Any], changes: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return _frozen({**current, **(changes or {})})


def reduce(state: TaskViewState, action: Action) -> TaskViewState:
    """Apply ``action`` to ``state`` and return the resulting snapshot."""
    kind = ActionType(action.type)
    payload = action.payload

    if kind is ActionType.SET_TASKS:
        return replace(state, tasks=tuple(_frozen(task) for task in payload or ()))
    if kind is ActionType.ADD_TASK:
        return replace(state, tasks=(_frozen(payload),) + state.tasks)
    if kind is ActionType.UPDATE_TASK:
        updated = _frozen(payload)
        return replace(state, tasks=tuple(
            updated if task.get("id") == updated.get("id") else task for task in state.tasks
        ))
    if kind is ActionType.DELETE_TASK:
        return replace(state, tasks=tuple(task for task in state.tasks if task.get("id") != payload))
    if kind is ActionType.SET_FILTERS:
        return replace(state, filters=_merge(state.filters, payload))
    if kind is ActionType.SET_SORT:
        return replace(state, sort=_merge(state.sort, payload))
    if kind is ActionType.SET_SEARCH:
        return replace(state, search=payload or "")
    if kind is ActionType.SET_PAGINATION:
        return replace(state, pagination=_merge(state.pagination, payload))
    raise ValueError(f"Unknown action type: {action.type}")


def set_page(state: TaskViewState, page: int) -> TaskViewState:
    return reduce(state, Action(ActionType.SET_PAGINATION, {"currentPage": page}))


def set_filters(state: TaskViewState, filters: Mapping[str, Any]) -> TaskViewState:
    """Merge ``filters`` and go back to the first page of the new selection."""
    return set_page(reduce(state, Action(ActionType.SET_FILTERS, filters)), 1)


def set_sort(state: TaskViewState, sort: Mapping[str, Any]) -> TaskViewState:
    return set_page(reduce(state, Action(ActionType.SET_SORT, sort)), 1)


def set_search(state: TaskViewState, search: str) -> TaskViewState:
    return set_page(reduce(state, Action(ActionType.SET_SEARCH, search)), 1)


def clear_filters(state: TaskViewState) -> TaskViewState:
    """Drop the status and priority filters and the search term."""
    state = reduce(state, Action(ActionType.SET_FILTERS, {"status": "", "priority": ""}))
    return set_search(state, "")


def completion_rate(stats: Mapping[str, Any]) -> int:
    """Percentage of completed tasks, halves rounded up; 0 when there are none."""
    total = stats.get("total") or 0
    if not total:
        return 0
    return int(100 * (stats.get("completed") or 0) / total + 0.5)
