"""TaskDesk: personal task manager backend."""

__version__ = "1.0.0"
