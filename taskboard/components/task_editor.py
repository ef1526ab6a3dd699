"""
Task editor: the modal create/edit form.

Bound to ``None`` (create mode) or an existing :class:`Task` (edit mode).
Submits the form payload to the matching endpoint and reports the record
the server returns to its owner; dismissal is the owner's job.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..api_client import ApiError, SessionExpiredError, TaskApiClient
from ..models import Task, TaskPriority
from .base import Component

logger = logging.getLogger(__name__)

CREATE_MODE = "create"
EDIT_MODE = "edit"

FORM_FIELDS = ("title", "description", "priority", "dueDate")


class TaskEditor(Component):
    """
    Create/edit form state for one task.

    Attributes:
        task: The record being edited, or ``None`` when creating.
        form: Current form values, all strings.  ``dueDate`` uses the
            ``YYYY-MM-DD`` format of a date input.
        error: Inline error string, empty when there is none.
    """

    def __init__(self, client: TaskApiClient, task: Task | None = None):
        super().__init__()
        self.client = client
        self.task = task
        self.error = ""
        self.form: dict[str, str] = {
            "title": "",
            "description": "",
            "priority": TaskPriority.MEDIUM.value,
            "dueDate": "",
        }
        if task is not None:
            self.form.update(
                title=task.title,
                description=task.description or "",
                priority=task.priority.value,
                dueDate=task.due_date.isoformat() if task.due_date else "",
            )

    @property
    def mode(self) -> str:
        return CREATE_MODE if self.task is None else EDIT_MODE

    @property
    def heading(self) -> str:
        return "Create New Task" if self.task is None else "Edit Task"

    @property
    def submitting(self) -> bool:
        return self.is_in_flight("submit")

    def update(self, form: Mapping[str, str]) -> None:
        """
        Copy submitted values into the form.

        A priority outside ``TaskPriority`` is ignored so the form only
        ever holds an enumerated value.
        """
        for name in FORM_FIELDS:
            if name not in form:
                continue
            value = form[name]
            if name == "priority" and value not in {p.value for p in TaskPriority}:
                continue
            self.form[name] = value

    def payload(self) -> dict[str, Any]:
        return {
            "title": self.form["title"].strip(),
            "description": self.form["description"].strip(),
            "priority": self.form["priority"],
            "dueDate": self.form["dueDate"] or None,
        }

    def submit(self, on_success: Callable[[Task], None]) -> Task | None:
        """
        Send the form to the create or update endpoint.

        Args:
            on_success: Receives the server's record.  The form itself is
                left as-is.  It is called even when the editor was closed
                while the request ran; the owner decides whether to apply
                the record.

        Returns:
            The server's record, or ``None`` with :attr:`error` set.

        Raises:
            RequestInFlightError: If a submission is already running.
            SessionExpiredError: If the API rejected the credential.
        """
        if not self.form["title"].strip():
            self.error = "Title is required"
            return None

        with self.in_flight("submit"):
            self.error = ""
            try:
                if self.task is None:
                    record = self.client.create_task(self.payload())
                else:
                    record = self.client.update_task(self.task.id, self.payload())
            except SessionExpiredError:
                raise
            except ApiError as error:
                if self._drop_if_disposed("submit"):
                    return None
                logger.warning("Task %s failed: %s", self.mode, error.message)
                self.error = error.message
                return None

        if not self.alive:
            logger.debug("Editor closed before %s finished; handing record to owner", self.mode)
        on_success(record)
        return record
