"""Logging configuration shared by the API process."""
import logging
import sys

from taskdesk.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Install a stdout handler on the root logger.

    Safe to call more than once; the handler is only added the first time.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))

    # Prevent adding handlers multiple times
    if any(getattr(h, "_taskdesk", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._taskdesk = True
    root.addHandler(handler)
