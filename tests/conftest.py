"""
Shared pytest fixtures for the taskboard test suite.

Provides the Flask app and test client, a fake remote task API installed
in place of ``requests.request``, API clients and sessions for component
tests, and a Faker-backed factory for task records.

Key Concepts Demonstrated:
- Fixture scopes (function, session)
- Monkeypatching the HTTP layer with an in-memory fake server
- Test data factories
"""

import os

import pytest
from faker import Faker

# Set testing environment before importing app
os.environ["FLASK_ENV"] = "testing"

from shared.test_helpers import (
    DEFAULT_TEST_PASSWORD,
    DEFAULT_TEST_USERNAME,
    FakeTaskServer,
    create_test_token,
)
from taskboard import create_app
from taskboard.api_client import TaskApiClient
from taskboard.models import Session

# Initialize Faker for generating test data
fake = Faker()


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def app():
    """
    Create application instance for the test session.

    The 'session' scope means the same app instance is reused for all
    tests; per-browser state lives in workspaces keyed by the client's
    cookie, so tests stay isolated through fresh clients.
    """
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Provide a Flask test client scoped to a single test function."""
    with app.test_client() as test_client:
        yield test_client


# -----------------------------------------------------------------------------
# Remote API Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def task_server(monkeypatch):
    """
    Install an in-memory fake of the remote task API.

    Every HTTP call made by ``TaskApiClient`` is routed to the returned
    :class:`FakeTaskServer`, which already knows the default test user.
    """
    server = FakeTaskServer()
    server.add_user(DEFAULT_TEST_USERNAME, DEFAULT_TEST_PASSWORD)
    monkeypatch.setattr("taskboard.api_client.requests.request", server)
    return server


@pytest.fixture
def api_client():
    """An unauthenticated client pointed at the fake API host."""
    return TaskApiClient("http://task-api", "http://task-api", auth_timeout=1, task_timeout=1)


@pytest.fixture
def test_session(task_server):
    """A session whose token the fake API accepts."""
    token = create_test_token(username=DEFAULT_TEST_USERNAME)
    task_server.tokens[token] = DEFAULT_TEST_USERNAME
    return Session(identity={"username": DEFAULT_TEST_USERNAME}, token=token)


@pytest.fixture
def logged_in_client(client, task_server):
    """A test client that has already logged in through the session gate."""
    response = client.post(
        "/login",
        data={"username": DEFAULT_TEST_USERNAME, "password": DEFAULT_TEST_PASSWORD},
    )
    assert response.status_code == 302
    return client


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def task_factory(task_server):
    """
    Factory fixture for seeding task records on the fake API.

    Example:
        def test_something(task_factory):
            record = task_factory(title="My Task")
            assert record["_id"]
    """

    def _create_task(
        title: str | None = None,
        description: str | None = None,
        status: str = "pending",
        priority: str = "medium",
        due_date: str | None = None,
        **extra,
    ) -> dict:
        return task_server.add_task(
            title=title or fake.sentence(nb_words=4),
            description=description if description is not None else fake.paragraph(),
            status=status,
            priority=priority,
            dueDate=due_date,
            **extra,
        )

    return _create_task
