"""
HTTP client for the remote task API.

Centralises all communication with the auth and task endpoints so that
every call carries the session's bearer credential, respects the
configured per-service timeout, and reports failures through a single
exception hierarchy:

- ``ApiError`` -- the server answered with an error (carries its message).
- ``TransportError`` -- the request never got a usable answer (timeout,
  connection refused ...).
- ``SessionExpiredError`` -- an authenticated call was rejected with 401,
  or the local session is no longer active.

Components never touch :mod:`requests` directly; they receive a
``TaskApiClient`` bound to an explicit :class:`~taskboard.models.Session`.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from .models import Session, Task

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "An error occurred"

LOGIN_MODE = "login"
REGISTER_MODE = "register"

AUTH_ENDPOINTS = {
    LOGIN_MODE: "/api/auth/login",
    REGISTER_MODE: "/api/auth/register",
}


class ApiError(Exception):
    """
    A request to the remote API failed.

    Attributes:
        message: Human-readable description, preferably the server's own.
        status_code: HTTP status of the response, or ``None`` when no
            response was received.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(ApiError):
    """The request failed at the network level (timeout, unreachable host)."""


class SessionExpiredError(ApiError):
    """The bearer credential was rejected or the session was released."""


def response_error_message(response: requests.Response, default: str) -> str:
    """
    Extract an error message from a JSON API response if possible.

    Reads the body's ``message`` field, then ``error``.  Falls back to
    *default* when the body is not JSON or both fields are missing/blank.

    Args:
        response: The :class:`requests.Response` from the remote API.
        default: Fallback message returned when extraction fails.

    Returns:
        The extracted error string, or *default*.
    """
    try:
        payload = response.json()
    except ValueError:
        return default
    if not isinstance(payload, dict):
        return default
    for key in ("message", "error"):
        message = payload.get(key)
        if isinstance(message, str) and message.strip():
            return message
    return default


def _join_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


class TaskApiClient:
    """
    Thin wrapper around the auth and task endpoints.

    Args:
        auth_url: Base URL of the auth endpoints.
        task_url: Base URL of the task endpoints.
        auth_timeout: Timeout in seconds for auth calls.
        task_timeout: Timeout in seconds for task calls.
        session: Session whose credential is attached to task calls.
            Auth calls need none.
    """

    def __init__(
        self,
        auth_url: str,
        task_url: str,
        *,
        auth_timeout: float = 5,
        task_timeout: float = 5,
        session: Session | None = None,
    ):
        self.auth_url = auth_url
        self.task_url = task_url
        self.auth_timeout = auth_timeout
        self.task_timeout = task_timeout
        self.session = session

    @classmethod
    def from_config(cls, config: Any, session: Session | None = None) -> TaskApiClient:
        """Build a client from a Flask ``app.config`` mapping."""
        return cls(
            config["AUTH_SERVICE_URL"],
            config["TASK_SERVICE_URL"],
            auth_timeout=config["AUTH_SERVICE_TIMEOUT"],
            task_timeout=config["TASK_SERVICE_TIMEOUT"],
            session=session,
        )

    def with_session(self, session: Session) -> TaskApiClient:
        """Return a copy of this client bound to *session*."""
        return TaskApiClient(
            self.auth_url,
            self.task_url,
            auth_timeout=self.auth_timeout,
            task_timeout=self.task_timeout,
            session=session,
        )

    # -----------------------------------------------------------------
    # Transport
    # -----------------------------------------------------------------

    def _send(
        self,
        method: str,
        url: str,
        *,
        timeout: float,
        headers: dict[str, str] | None = None,
        service: str = "Task service",
        **kwargs,
    ) -> requests.Response:
        try:
            return requests.request(
                method=method,
                url=url,
                headers=headers or {},
                timeout=timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            raise TransportError(f"{service} timed out. Please try again.") from exc
        except requests.RequestException as exc:
            raise TransportError(f"{service} unavailable. Please try again later.") from exc

    def _call_task_api(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Call a task endpoint with the session's bearer credential.

        Raises:
            SessionExpiredError: If the session is missing, released or
                expired (no request is sent), or the API answers 401.
            ApiError: For any other non-2xx answer.
            TransportError: For network-level failures.
        """
        if self.session is None or not self.session.active:
            raise SessionExpiredError("Session expired. Please log in again.", 401)

        response = self._send(
            method,
            _join_url(self.task_url, path),
            timeout=self.task_timeout,
            headers={"Authorization": f"Bearer {self.session.token}"},
            **kwargs,
        )
        if response.status_code == 401:
            raise SessionExpiredError("Session expired. Please log in again.", 401)
        if response.status_code >= 400:
            raise ApiError(
                response_error_message(response, DEFAULT_ERROR_MESSAGE),
                response.status_code,
            )
        return response

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("Invalid response received from task API.", response.status_code) from exc

    @classmethod
    def _task_from(cls, response: requests.Response) -> Task:
        try:
            return Task.from_api(cls._json(response))
        except ValueError as exc:
            raise ApiError(f"Invalid task received: {exc}", response.status_code) from exc

    # -----------------------------------------------------------------
    # Auth endpoints
    # -----------------------------------------------------------------

    def authenticate(self, mode: str, fields: dict[str, str]) -> tuple[dict[str, Any], str]:
        """
        Log in or register with the auth endpoint.

        Args:
            mode: ``"login"`` or ``"register"``.
            fields: Form values.  ``email`` is only sent when registering.

        Returns:
            The ``(user, token)`` pair from the response body.

        Raises:
            ApiError: With the server's message when credentials are
                rejected, or when the success body lacks ``user``/``token``.
            TransportError: For network-level failures.
        """
        body = {"username": fields.get("username", ""), "password": fields.get("password", "")}
        if mode == REGISTER_MODE:
            body["email"] = fields.get("email", "")

        response = self._send(
            "POST",
            _join_url(self.auth_url, AUTH_ENDPOINTS[mode]),
            timeout=self.auth_timeout,
            service="Login service",
            json=body,
        )
        if response.status_code >= 400:
            raise ApiError(
                response_error_message(response, DEFAULT_ERROR_MESSAGE),
                response.status_code,
            )

        payload = self._json(response)
        user = payload.get("user") if isinstance(payload, dict) else None
        token = payload.get("token") if isinstance(payload, dict) else None
        if not isinstance(user, dict) or not isinstance(token, str) or not token:
            raise ApiError("Invalid login response received.", response.status_code)
        return user, token

    # -----------------------------------------------------------------
    # Task endpoints
    # -----------------------------------------------------------------

    def list_tasks(self) -> list[Task]:
        """
        Fetch the caller's task collection in server order.

        Accepts either a bare JSON array or a ``{"tasks": [...]}`` envelope.
        A record that cannot be parsed is logged and skipped; the rest of
        the collection is still returned.
        """
        response = self._call_task_api("GET", "/api/tasks")
        payload = self._json(response)
        if isinstance(payload, dict):
            payload = payload.get("tasks")
        if not isinstance(payload, list):
            raise ApiError("Invalid task list received.", response.status_code)

        tasks = []
        for item in payload:
            try:
                tasks.append(Task.from_api(item))
            except ValueError as exc:
                logger.warning("Skipping invalid task received: %s", exc)
        return tasks

    def create_task(self, payload: dict[str, Any]) -> Task:
        response = self._call_task_api("POST", "/api/tasks", json=payload)
        return self._task_from(response)

    def update_task(self, task_id: str, payload: dict[str, Any]) -> Task:
        """Send a full or partial update and return the server's record."""
        response = self._call_task_api("PUT", f"/api/tasks/{task_id}", json=payload)
        return self._task_from(response)

    def delete_task(self, task_id: str) -> None:
        self._call_task_api("DELETE", f"/api/tasks/{task_id}")
