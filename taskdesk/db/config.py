"""Database configuration for TaskDesk."""
from typing import Generator
import logging

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine, Session

from taskdesk.config import DATABASE_URL, SQL_ECHO

logger = logging.getLogger(__name__)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def create_db_engine(database_url: str = DATABASE_URL, echo: bool = SQL_ECHO) -> Engine:
    """Create an engine for ``database_url``.

    SQLite connections are shared across threads and enforce foreign keys so
    that task tags are removed together with their task. An in-memory SQLite
    URL gets a single static connection so every session sees the same data.

    SQLite's built-in ``lower()`` folds ASCII only. It is replaced per
    connection so that ``ILIKE`` (compiled as ``lower(x) LIKE lower(y)``)
    ignores case for all of Unicode.
    """
    if not database_url.startswith("sqlite"):
        logger.info("Using database: %s", database_url.split("@")[-1])
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    logger.info("Using SQLite database: %s", database_url)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    engine = create_engine(database_url, echo=echo, **kwargs)

    @event.listens_for(engine, "connect")
    def configure_sqlite_connection(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)

    return engine


engine = create_db_engine()


def get_session() -> Generator[Session, None, None]:
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session
