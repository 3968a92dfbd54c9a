"""Pytest configuration and shared fixtures."""

import os

# Settings are cached on first use; point them at throwaway backends before
# any requestflow module reads them.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["NOTIFICATION_BACKEND"] = "log"
os.environ.pop("ROUTING_CONFIG_PATH", None)

from typing import List, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from requestflow.core.rbac import StaticPermissionAuthority
from requestflow.core.rbac.roles import default_role_table
from requestflow.core.workflow.engine import Actor, WorkflowEngine
from requestflow.core.workflow.events import WorkflowEvent
from requestflow.db.base import Base
import requestflow.db.models  # noqa: F401
from requestflow.services.dispatch import NotificationDispatcher


class RecordingDispatcher(NotificationDispatcher):
    """Keeps every hand-off so tests can assert on it."""

    def __init__(self):
        self.calls: List[Tuple[str, WorkflowEvent]] = []

    def notify_approval(self, event: WorkflowEvent) -> None:
        self.calls.append(("approval", event))

    def notify_rejection(self, event: WorkflowEvent) -> None:
        self.calls.append(("rejection", event))

    def notify_cancellation(self, event: WorkflowEvent) -> None:
        self.calls.append(("cancellation", event))

    @property
    def events(self) -> List[WorkflowEvent]:
        return [event for _, event in self.calls]


class FailingDispatcher(NotificationDispatcher):
    """Raises on every call, like an unreachable broker."""

    def __init__(self):
        self.attempts = 0

    def notify_approval(self, event: WorkflowEvent) -> None:
        self.attempts += 1
        raise ConnectionError("broker unavailable")

    def notify_rejection(self, event: WorkflowEvent) -> None:
        self.attempts += 1
        raise ConnectionError("broker unavailable")


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """Fresh database session per test."""
    session = sessionmaker(bind=db_engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def session_factory(tmp_path):
    """File-backed sessionmaker: each session gets its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'requestflow.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def permission_authority():
    return StaticPermissionAuthority(default_role_table())


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def failing_dispatcher():
    return FailingDispatcher()


@pytest.fixture
def workflow_engine(db_session, permission_authority, dispatcher):
    return WorkflowEngine(db_session, permission_authority, dispatcher)


@pytest.fixture
def focal():
    return Actor(name="Fatimah Focal", role="Department Focal")


@pytest.fixture
def line_manager():
    return Actor(name="Lim Manager", role="Line Manager")


@pytest.fixture
def hod():
    return Actor(name="Hassan HOD", role="HOD")


@pytest.fixture
def finance():
    return Actor(name="Farah Finance", role="Finance")


@pytest.fixture
def requestor():
    return Actor(name="Rina Requestor", role="Requestor")


@pytest.fixture
def client(db_session, dispatcher):
    """API client backed by the test session, seeded roles and a recording dispatcher."""
    from requestflow.api.deps import get_db, get_notification_dispatcher
    from requestflow.api.main import app
    from requestflow.db.seed import seed_default_roles

    seed_default_roles(db_session)
    db_session.commit()

    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
