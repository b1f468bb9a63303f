"""Python client for the TaskDesk API."""

from .api import ApiError, TaskDeskClient
from .state import (
    Action,
    ActionType,
    TaskViewState,
    clear_filters,
    completion_rate,
    reduce,
    set_filters,
    set_page,
    set_search,
    set_sort,
)

__all__ = [
    "Action",
    "ActionType",
    "ApiError",
    "TaskDeskClient",
    "TaskViewState",
    "clear_filters",
    "completion_rate",
    "reduce",
    "set_filters",
    "set_page",
    "set_search",
    "set_sort",
]
