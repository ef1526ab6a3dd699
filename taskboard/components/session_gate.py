"""
Session gate: the login / registration form.

Collects credentials, submits them to the mode-appropriate auth endpoint
and, on success, hands ``(identity, token)`` to a caller-supplied
completion callback.  On failure the server's message (or a generic
fallback) becomes the visible error and every field stays populated so
the user can retry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..api_client import LOGIN_MODE, REGISTER_MODE, ApiError, TaskApiClient
from .base import Component

logger = logging.getLogger(__name__)

FIELDS = ("username", "email", "password")

OnAuthenticated = Callable[[dict[str, Any], str], None]


class SessionGate(Component):
    """
    Login/register form state.

    Attributes:
        mode: ``"login"`` or ``"register"``.
        fields: Current form values keyed by field name.
        error: Visible error string, empty when there is none.
    """

    def __init__(self, client: TaskApiClient, mode: str = LOGIN_MODE):
        super().__init__()
        self.client = client
        self.mode = LOGIN_MODE
        self.fields: dict[str, str] = {name: "" for name in FIELDS}
        self.error = ""
        self.set_mode(mode)

    @property
    def is_login(self) -> bool:
        return self.mode == LOGIN_MODE

    @property
    def submitting(self) -> bool:
        return self.is_in_flight("submit")

    @property
    def required_fields(self) -> tuple[str, ...]:
        if self.is_login:
            return ("username", "password")
        return FIELDS

    def set_mode(self, mode: str) -> None:
        """Switch between login and register; clears the error, keeps fields."""
        if mode not in (LOGIN_MODE, REGISTER_MODE):
            raise ValueError(f"Unknown session gate mode: {mode!r}")
        self.mode = mode
        self.error = ""

    def toggle_mode(self) -> None:
        self.set_mode(REGISTER_MODE if self.is_login else LOGIN_MODE)

    def update(self, form: Mapping[str, str]) -> None:
        """Copy submitted values for known fields into the form state."""
        for name in FIELDS:
            if name in form:
                self.fields[name] = form[name]

    def _missing_fields(self) -> list[str]:
        missing = []
        for name in self.required_fields:
            value = self.fields.get(name, "")
            if not (value if name == "password" else value.strip()):
                missing.append(name)
        return missing

    def submit(self, on_complete: OnAuthenticated) -> tuple[dict[str, Any], str] | None:
        """
        Submit the form to the auth endpoint for the current mode.

        A form with a blank required field is rejected locally and never
        reaches the network.

        Args:
            on_complete: Called with ``(identity, token)`` on success.  It
                may raise :class:`ApiError` to reject the credential.

        Returns:
            The ``(identity, token)`` pair on success, otherwise ``None``
            with :attr:`error` set.

        Raises:
            RequestInFlightError: If a submission is already running.
        """
        if self._missing_fields():
            self.error = (
                "Username and password are required."
                if self.is_login
                else "Username, email, and password are required."
            )
            return None

        with self.in_flight("submit"):
            self.error = ""
            credentials = {
                "username": self.fields["username"].strip(),
                "email": self.fields["email"].strip(),
                "password": self.fields["password"],
            }
            try:
                identity, token = self.client.authenticate(self.mode, credentials)
                if self._drop_if_disposed("submit"):
                    return None
                on_complete(identity, token)
            except ApiError as error:
                if self._drop_if_disposed("submit"):
                    return None
                logger.warning("%s failed for %r: %s", self.mode, credentials["username"], error.message)
                self.error = error.message
                return None

        logger.info("%s succeeded for %r", self.mode, credentials["username"])
        return identity, token
