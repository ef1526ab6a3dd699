"""
Integration tests for the session gate routes.

Exercises login, registration, mode switching and logout through the
Flask test client while the remote auth and task endpoints are served by
the in-memory fake API.  Verifies the full request/response cycle (form
submission, workspace lifecycle, redirects, template rendering).
"""

from __future__ import annotations

import pytest

from taskboard import WORKSPACES_EXTENSION

pytestmark = pytest.mark.integration


def _workspace(app, client):
    with client.session_transaction() as sess:
        workspace_id = sess.get("workspace_id")
    return app.extensions[WORKSPACES_EXTENSION].get(workspace_id)


def test_health_endpoint(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "healthy", "service": "taskboard"}


def test_unauthenticated_user_redirected_to_login(client):
    """Test that accessing the root URL without a session redirects to /login."""
    # Act
    response = client.get("/", follow_redirects=False)

    # Assert
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/login")


def test_login_page_renders_gate(client, task_server):
    response = client.get("/login")

    assert response.status_code == 200
    assert b'data-testid="session-gate-form"' in response.data
    assert b'data-testid="gate-email-input"' not in response.data


def test_login_success_creates_session_and_redirects_home(app, client, task_server):
    """Test that a successful login binds a session and redirects home."""
    # Act
    response = client.post(
        "/login",
        data={"username": "test_user", "password": "secret"},
        follow_redirects=False,
    )

    # Assert
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/")
    workspace = _workspace(app, client)
    assert workspace.authenticated
    assert workspace.session.username == "test_user"
    assert workspace.session.token in task_server.tokens


def test_login_failure_shows_inline_error_and_keeps_username(client, task_server):
    response = client.post("/login", data={"username": "test_user", "password": "wrong"})

    assert response.status_code == 400
    assert b'data-testid="gate-error"' in response.data
    assert b"Invalid credentials" in response.data
    assert b'value="test_user"' in response.data


def test_failed_login_does_not_echo_password(client, task_server):
    response = client.post("/login", data={"username": "test_user", "password": "not-the-secret"})

    assert response.status_code == 400
    assert b"not-the-secret" not in response.data
    assert b'data-testid="gate-password-input" required' in response.data


def test_login_with_missing_password_dispatches_nothing(client, task_server):
    response = client.post("/login", data={"username": "test_user", "password": ""})

    assert response.status_code == 400
    assert b"Username and password are required." in response.data
    assert task_server.calls == []


def test_authenticated_user_skips_login_page(logged_in_client):
    response = logged_in_client.get("/login", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/")


def test_mode_toggle_keeps_typed_values(client, task_server):
    # Arrange
    client.get("/login")

    # Act
    client.post("/login/mode", data={"username": "typed_name", "password": ""})
    response = client.get("/login")

    # Assert
    assert b'data-testid="gate-email-input"' in response.data
    assert b'value="typed_name"' in response.data


def test_register_with_missing_email_dispatches_nothing(client, task_server):
    """Missing required field: inline error, fields retained, no API call."""
    # Arrange
    client.get("/register")

    # Act
    response = client.post(
        "/login",
        data={"username": "new_user", "email": "", "password": "secret"},
    )

    # Assert
    assert response.status_code == 400
    assert b"Username, email, and password are required." in response.data
    assert b'value="new_user"' in response.data
    assert task_server.calls == []


def test_register_success_signs_in(app, client, task_server):
    client.get("/register")

    response = client.post(
        "/login",
        data={"username": "new_user", "email": "new_user@example.com", "password": "secret"},
        follow_redirects=True,
    )

    assert response.status_code == 200
    assert b"Registration successful." in response.data
    assert b"Welcome, new_user!" in response.data
    assert "new_user" in task_server.users


def test_register_conflict_shows_server_message(client, task_server):
    client.get("/register")

    response = client.post(
        "/login",
        data={"username": "test_user", "email": "dup@example.com", "password": "secret"},
    )

    assert response.status_code == 400
    assert b"User already exists" in response.data


def test_logout_releases_workspace(app, logged_in_client):
    """Test that POST /logout discards the workspace and redirects to /login."""
    # Arrange
    workspace = _workspace(app, logged_in_client)
    session = workspace.session

    # Act
    response = logged_in_client.post("/logout", follow_redirects=False)

    # Assert
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/login")
    assert session.active is False
    assert _workspace(app, logged_in_client) is None
    assert logged_in_client.get("/", follow_redirects=False).status_code == 302


def test_rejected_credential_ends_session(app, logged_in_client, task_factory, task_server):
    """A 401 from the task API releases the session and asks for a new login."""
    # Arrange
    record = task_factory()
    logged_in_client.get("/")
    logged_in_client.post(f"/tasks/{record['_id']}/edit")
    task_server.tokens.clear()

    # Act
    response = logged_in_client.post(
        "/editor/submit", data={"title": "Edited", "priority": "low"}, follow_redirects=True
    )

    # Assert
    assert b"Session expired. Please log in again." in response.data
    assert b'data-testid="session-gate-form"' in response.data


def test_api_rejection_during_action_ends_session(app, logged_in_client, task_factory, task_server):
    record = task_factory()
    logged_in_client.get("/")
    task_server.tokens.clear()

    response = logged_in_client.post(
        f"/tasks/{record['_id']}/status", data={"status": "completed"}, follow_redirects=False
    )

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/login")
    assert _workspace(app, logged_in_client) is None
