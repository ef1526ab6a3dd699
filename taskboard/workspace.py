"""
Per-browser workspaces.

A ``Workspace`` is the client-side state of one browser: the session gate
shown before login, the authenticated ``Session`` and the task list
controller built for it.  Workspaces live in memory only, in a
``WorkspaceRegistry`` keyed by a random id that is stored in the Flask
session cookie.  Nothing is persisted: logging out, going idle for too
long, or restarting the process discards the workspace.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from typing import Any

import jwt

from .api_client import ApiError, TaskApiClient
from .auth import read_token_expiry
from .components import SessionGate, TaskListController
from .models import Session

logger = logging.getLogger(__name__)


class Workspace:
    """
    State of one browser across requests.

    Attributes:
        gate: Login/register form, shown while not authenticated.
        session: The authenticated session, or ``None``.
        dashboard: Task list controller bound to :attr:`session`.
    """

    def __init__(
        self,
        client: TaskApiClient,
        *,
        public_key: str | None = None,
        leeway: int = 30,
    ):
        self.client = client
        self.public_key = public_key
        self.leeway = leeway
        self.gate = SessionGate(client)
        self.session: Session | None = None
        self.dashboard: TaskListController | None = None
        self.last_seen = time.monotonic()

    @property
    def authenticated(self) -> bool:
        return self.session is not None and self.session.active

    def sign_in(self, identity: dict[str, Any], token: str) -> None:
        """
        Completion callback for the session gate.

        A previous (expired) session and its dashboard are released before
        the new ones are bound.

        Raises:
            ApiError: If a public key is configured and the credential
                fails verification.
        """
        try:
            expires_at = read_token_expiry(token, self.public_key, leeway=self.leeway)
        except jwt.InvalidTokenError as exc:
            raise ApiError("Invalid login response received.") from exc

        self._release_session()
        self.session = Session(identity=identity, token=token, expires_at=expires_at)
        self.dashboard = TaskListController(self.client, self.session)

    def sign_out(self) -> None:
        """Release the session and drop all state derived from it."""
        self._release_session()
        self.gate.dispose()
        self.gate = SessionGate(self.client)

    def _release_session(self) -> None:
        if self.dashboard is not None:
            self.dashboard.dispose()
            self.dashboard = None
        if self.session is not None:
            self.session.release()
            self.session = None


class WorkspaceRegistry:
    """
    Thread-safe in-memory store of workspaces.

    Args:
        idle_seconds: Workspaces not touched for this long are pruned
            whenever a new one is created.
    """

    def __init__(self, idle_seconds: float = 3600):
        self.idle_seconds = idle_seconds
        self._workspaces: dict[str, Workspace] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._workspaces)

    def get(self, workspace_id: str | None) -> Workspace | None:
        if not workspace_id:
            return None
        with self._lock:
            workspace = self._workspaces.get(workspace_id)
        if workspace is not None:
            workspace.last_seen = time.monotonic()
        return workspace

    def add(self, workspace: Workspace) -> str:
        """Store *workspace* under a fresh id and return the id."""
        workspace_id = secrets.token_urlsafe(24)
        with self._lock:
            self._prune_locked()
            self._workspaces[workspace_id] = workspace
        return workspace_id

    def discard(self, workspace_id: str | None) -> None:
        if not workspace_id:
            return
        with self._lock:
            workspace = self._workspaces.pop(workspace_id, None)
        if workspace is not None:
            workspace.sign_out()

    def _prune_locked(self) -> None:
        cutoff = time.monotonic() - self.idle_seconds
        stale = [key for key, ws in self._workspaces.items() if ws.last_seen < cutoff]
        for key in stale:
            self._workspaces.pop(key).sign_out()
        if stale:
            logger.info("Pruned %d idle workspaces", len(stale))
