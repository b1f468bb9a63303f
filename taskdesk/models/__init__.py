"""SQLModel tables for TaskDesk."""

from .user import User
from .task import Task, TaskTag

__all__ = ["User", "Task", "TaskTag"]
