"""Shared fixtures: in-memory database, users and an API client."""
from datetime import timedelta
from typing import Dict

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from taskdesk.db.config import create_db_engine, get_session
from taskdesk.db.init import init_db
from taskdesk.main import app
from taskdesk.middleware.auth import create_access_token
from taskdesk.models.base import utcnow
from taskdesk.models.user import User
from taskdesk.services.task_service import TaskService
from taskdesk.services.user_service import hash_password

PASSWORD = "secret123"
# Hashed once per test run
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://", echo=False)
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


def make_user(session: Session, username: str, **extra) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=PASSWORD_HASH,
        **extra,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def alice(session) -> User:
    return make_user(session, "alice", first_name="Alice", last_name="Liddell")


@pytest.fixture
def bob(session) -> User:
    return make_user(session, "bob")


@pytest.fixture
def alice_tasks(session, alice) -> TaskService:
    return TaskService(session, alice.id)


@pytest.fixture
def bob_tasks(session, bob) -> TaskService:
    return TaskService(session, bob.id)


@pytest.fixture
def yesterday():
    return utcnow() - timedelta(days=1)


@pytest.fixture
def tomorrow():
    return utcnow() + timedelta(days=1)


@pytest.fixture
def client(session):
    app.dependency_overrides[get_session] = lambda: session
    # No context manager: the lifespan would create tables in the configured database
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}
