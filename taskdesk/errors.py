"""
Error taxonomy for TaskDesk.

Every error carries a machine-readable code, a caller-safe message and an
HTTP status. Exception handlers in ``taskdesk.main`` turn them into JSON
responses of the form ``{"message": ..., "errors": [...]}``.
"""

from typing import Any, Dict, List, Optional


class TaskDeskError(Exception):
    """Base exception for TaskDesk errors"""

    status_code = 500
    code = "ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationError(TaskDeskError):
    """Malformed or out-of-range input.

    ``errors`` lists every offending field as ``{"field", "message"}``;
    validation is collected, never short-circuited on the first failure.
    """

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, errors: List[Dict[str, Any]], message: str = "Validation failed"):
        self.errors = errors
        super().__init__(message, details={"errors": errors})

    @property
    def fields(self) -> List[str]:
        return [error["field"] for error in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class NotFound(TaskDeskError):
    """Record absent or not owned by the requester (deliberately indistinguishable)."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Task not found"):
        super().__init__(message)


class Unauthorized(TaskDeskError):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class Conflict(TaskDeskError):
    status_code = 409
    code = "CONFLICT"


class InternalError(TaskDeskError):
    """Unexpected persistence failure. The message never carries internal detail."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
