"""Initialize database tables."""
import logging

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

# Imported for their side effect of registering tables on SQLModel.metadata
from taskdesk.models.user import User  # noqa: F401
from taskdesk.models.task import Task, TaskTag  # noqa: F401
from taskdesk.db.config import engine as default_engine

logger = logging.getLogger(__name__)


def init_db(engine: Engine = default_engine) -> None:
    """Create all tables that do not exist yet."""
    logger.info("Creating database tables...")
    SQLModel.metadata.create_all(engine)
    logger.info("Database tables ready.")


if __name__ == "__main__":
    init_db()
