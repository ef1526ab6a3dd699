"""
Unit tests for per-browser workspaces and their registry.
"""

from __future__ import annotations

import pytest

from shared.test_helpers import (
    TEST_PUBLIC_KEY,
    create_test_token,
    generate_throwaway_key_pair,
)
from taskboard.api_client import ApiError
from taskboard.workspace import Workspace, WorkspaceRegistry


pytestmark = pytest.mark.unit


def test_sign_in_builds_session_and_dashboard(api_client):
    workspace = Workspace(api_client)
    token = create_test_token(username="demo")

    workspace.sign_in({"username": "demo"}, token)

    assert workspace.authenticated
    assert workspace.session.username == "demo"
    assert workspace.session.expires_at is not None
    assert workspace.dashboard.session is workspace.session
    assert workspace.dashboard.client.session is workspace.session


def test_sign_in_with_opaque_token_has_no_expiry(api_client):
    workspace = Workspace(api_client)

    workspace.sign_in({"username": "demo"}, "opaque-token")

    assert workspace.session.expires_at is None
    assert workspace.authenticated


def test_sign_in_rejects_unverifiable_token_when_key_configured(api_client):
    foreign_private, _ = generate_throwaway_key_pair()
    workspace = Workspace(api_client, public_key=TEST_PUBLIC_KEY)

    with pytest.raises(ApiError, match="Invalid login response"):
        workspace.sign_in({"username": "demo"}, create_test_token(private_key=foreign_private))

    assert workspace.session is None


def test_expired_token_is_not_authenticated(api_client):
    workspace = Workspace(api_client)

    workspace.sign_in({"username": "demo"}, create_test_token(expired=True))

    assert workspace.authenticated is False


def test_sign_out_releases_everything(api_client):
    workspace = Workspace(api_client)
    workspace.sign_in({"username": "demo"}, create_test_token())
    session, dashboard, old_gate = workspace.session, workspace.dashboard, workspace.gate

    workspace.sign_out()

    assert session.active is False
    assert dashboard.alive is False
    assert old_gate.alive is False
    assert workspace.session is None
    assert workspace.dashboard is None
    assert workspace.gate is not old_gate


def test_sign_in_over_expired_session_releases_previous(api_client):
    # Arrange
    workspace = Workspace(api_client)
    workspace.sign_in({"username": "demo"}, create_test_token(expired=True))
    old_session, old_dashboard = workspace.session, workspace.dashboard

    # Act
    workspace.sign_in({"username": "demo"}, create_test_token())

    # Assert
    assert old_session.released is True
    assert old_dashboard.alive is False
    assert workspace.session is not old_session
    assert workspace.dashboard.alive is True
    assert workspace.authenticated


def test_rejected_sign_in_keeps_current_session(api_client):
    workspace = Workspace(api_client, public_key=TEST_PUBLIC_KEY)
    workspace.sign_in({"username": "demo"}, create_test_token())
    current = workspace.session
    foreign_private, _ = generate_throwaway_key_pair()

    with pytest.raises(ApiError):
        workspace.sign_in({"username": "demo"}, create_test_token(private_key=foreign_private))

    assert workspace.session is current
    assert current.released is False


def test_registry_add_get_discard(api_client):
    registry = WorkspaceRegistry()
    workspace = Workspace(api_client)
    workspace.sign_in({"username": "demo"}, create_test_token())

    workspace_id = registry.add(workspace)

    assert registry.get(workspace_id) is workspace
    assert registry.get("unknown") is None
    assert registry.get(None) is None

    registry.discard(workspace_id)

    assert registry.get(workspace_id) is None
    assert workspace.session is None


def test_registry_prunes_idle_workspaces(api_client):
    registry = WorkspaceRegistry(idle_seconds=60)
    stale = Workspace(api_client)
    stale_id = registry.add(stale)
    stale.last_seen -= 120

    registry.add(Workspace(api_client))

    assert registry.get(stale_id) is None
    assert len(registry) == 1
