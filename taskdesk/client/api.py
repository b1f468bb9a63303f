"""HTTP client for the TaskDesk REST API."""
from typing import Any, Dict, List, Optional
import logging

import httpx

from taskdesk.client.state import Action, ActionType, TaskViewState, reduce

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        super().__init__(f"{status_code}: {message}")


class TaskDeskClient:
    """Synchronous client; ``login`` and ``register`` store the issued token.

    Pass ``http`` to reuse an existing ``httpx.Client`` (its base URL is used
    as is and it is not closed by :meth:`close`).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: Optional[str] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self._owns_http = http is None
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token = token

    def __enter__(self) -> "TaskDeskClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        response = self._http.request(method, path, headers=headers, **kwargs)
        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            message = body.get("message") or response.reason_phrase
            logger.debug("%s %s failed: %s %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message, body.get("errors"))
        return response.json()

    # Authentication

    def register(self, **user: Any) -> Dict[str, Any]:
        data = self._request("POST", "/api/auth/register", json=user)
        self.token = data["token"]
        return data["user"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data["user"]

    def logout(self) -> None:
        self.token = None

    def profile(self) -> Dict[str, Any]:
        return self._request("GET", "/api/auth/profile")["user"]

    def update_profile(self, **changes: Any) -> Dict[str, Any]:
        return self._request("PUT", "/api/auth/profile", json=changes)["user"]

    # Tasks

    def list_tasks(self, **params: Any) -> Dict[str, Any]:
        """Return ``{"tasks": [...], "pagination": {...}}``; ``None`` params are omitted."""
        query = {key: value for key, value in params.items() if value is not None}
        return self._request("GET", "/api/tasks", params=query)

    def get_task(self, task_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/tasks/{task_id}")["task"]

    def create_task(self, **task: Any) -> Dict[str, Any]:
        return self._request("POST", "/api/tasks", json=task)["task"]

    def update_task(self, task_id: str, **changes: Any) -> Dict[str, Any]:
        return self._request("PUT", f"/api/tasks/{task_id}", json=changes)["task"]

    def delete_task(self, task_id: str) -> None:
        self._request("DELETE", f"/api/tasks/{task_id}")

    def set_status(self, task_id: str, status: str) -> Dict[str, Any]:
        return self._request("PATCH", f"/api/tasks/{task_id}/status", json={"status": status})["task"]

    def complete_task(self, task_id: str) -> Dict[str, Any]:
        return self._request("PATCH", f"/api/tasks/{task_id}/complete")["task"]

    def stats(self) -> Dict[str, Any]:
        return self._request("GET", "/api/tasks/stats")["stats"]

    def refresh(self, state: TaskViewState) -> TaskViewState:
        """Fetch the page described by ``state`` and return the updated snapshot."""
        data = self.list_tasks(**state.query_params())
        state = reduce(state, Action(ActionType.SET_TASKS, data["tasks"]))
        return reduce(state, Action(ActionType.SET_PAGINATION, data["pagination"]))

