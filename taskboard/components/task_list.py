"""
Task list controller: the dashboard.

Owns the local task collection for one authenticated session.  The
collection is the single source of truth for rendering and is only ever
changed after the server confirms an operation, always by swapping whole
records (or the whole tuple), never by editing a record in place:

- load: replaced by the server's list (empty on failure);
- create: the new record is prepended;
- edit / status change: the record with the same id is replaced by the
  server's representation, other records keep their order;
- delete: the record is removed after the user confirms.

Key Concepts Demonstrated:
- Reconcile-after-confirm state updates
- Server representation wins over local state (status changes)
- Delete confirmation as an injected callback
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import date

from ..api_client import ApiError, SessionExpiredError, TaskApiClient
from ..models import Session, Task, TaskPriority, TaskStatus
from .base import Component
from .task_editor import TaskEditor

logger = logging.getLogger(__name__)

FALLBACK_COLOR = "#6c757d"

STATUS_COLORS = {
    TaskStatus.COMPLETED.value: "#28a745",
    TaskStatus.IN_PROGRESS.value: "#ffc107",
    TaskStatus.PENDING.value: "#dc3545",
}

PRIORITY_COLORS = {
    TaskPriority.HIGH.value: "#dc3545",
    TaskPriority.MEDIUM.value: "#ffc107",
    TaskPriority.LOW.value: "#28a745",
}


def status_color(status: TaskStatus | str) -> str:
    """Badge colour for a task status."""
    return STATUS_COLORS.get(getattr(status, "value", status), FALLBACK_COLOR)


def priority_color(priority: TaskPriority | str) -> str:
    """Badge colour for a task priority."""
    return PRIORITY_COLORS.get(getattr(priority, "value", priority), FALLBACK_COLOR)


def format_due_date(value: date | None, fmt: str = "%b %d, %Y") -> str:
    """Format a due date for display; an absent date renders as ``""``."""
    if value is None:
        return ""
    return value.strftime(fmt)


class TaskNotFoundError(LookupError):
    """No task with the given id is in the local collection."""


class TaskListController(Component):
    """
    Dashboard state for one session.

    Args:
        client: API client; a copy bound to *session* is used for calls.
        session: The authenticated session this dashboard belongs to.

    Attributes:
        tasks: The local collection, in display order.
        loading: True while the initial fetch is running.
        loaded: True once the initial fetch has completed either way.
        editor: The open task editor, if any.
        pending_delete: Task awaiting delete confirmation, if any.
        notice: Visible message about the last failed delete or status
            change, empty when there is none.
    """

    def __init__(self, client: TaskApiClient, session: Session):
        super().__init__()
        self.session = session
        self.client = client.with_session(session)
        self.tasks: tuple[Task, ...] = ()
        self.loading = False
        self.loaded = False
        self.editor: TaskEditor | None = None
        self.pending_delete: Task | None = None
        self.notice = ""

    @property
    def is_empty(self) -> bool:
        return not self.tasks

    def find(self, task_id: str) -> Task | None:
        return next((task for task in self.tasks if task.id == task_id), None)

    def _require(self, task_id: str) -> Task:
        task = self.find(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    # -----------------------------------------------------------------
    # Load
    # -----------------------------------------------------------------

    def mount(self) -> None:
        """Run the initial fetch on first render only."""
        if not self.loaded and not self.loading:
            self.load()

    def load(self) -> None:
        """
        Fetch the task collection and replace the local one with it.

        A failed fetch is logged and leaves an empty collection; it is not
        retried.

        Raises:
            SessionExpiredError: If the API rejected the credential.
        """
        with self.in_flight("load"):
            self.loading = True
            try:
                tasks = self.client.list_tasks()
            except SessionExpiredError:
                raise
            except ApiError as error:
                logger.error("Error fetching tasks: %s", error.message)
                tasks = []
            finally:
                self.loading = False
                self.loaded = True

        if self._drop_if_disposed("load"):
            return
        with self._lock:
            self.tasks = tuple(tasks)
        logger.info("Loaded %d tasks for %r", len(tasks), self.session.username)

    # -----------------------------------------------------------------
    # Create / edit through the task editor
    # -----------------------------------------------------------------

    def open_create(self) -> TaskEditor:
        self.close_editor()
        self.editor = TaskEditor(self.client)
        return self.editor

    def open_edit(self, task_id: str) -> TaskEditor:
        """
        Open the editor pre-populated with the task's current values.

        Raises:
            TaskNotFoundError: If the task is not in the collection.
        """
        task = self._require(task_id)
        self.close_editor()
        self.editor = TaskEditor(self.client, task)
        return self.editor

    def close_editor(self) -> None:
        """Dismiss the editor, discarding unsaved edits."""
        if self.editor is not None:
            self.editor.dispose()
            self.editor = None

    def submit_editor(self, form: Mapping[str, str]) -> Task | None:
        """
        Apply *form* to the open editor and submit it.

        A record the server confirms is reconciled into the collection as
        long as this controller is alive, even if the editor was closed or
        replaced while the request ran.  Only the editor that submitted is
        closed.

        Returns:
            The server's record on success, otherwise ``None`` (no editor
            open, or the editor now shows an error).
        """
        editor = self.editor
        if editor is None:
            return None
        editor.update(form)
        reconcile = self.handle_created if editor.task is None else self.handle_updated

        def on_success(task: Task) -> None:
            if self._drop_if_disposed("editor"):
                return
            reconcile(task)
            with self._lock:
                submitting_editor_open = self.editor is editor
            if submitting_editor_open:
                self.close_editor()

        return editor.submit(on_success)

    def handle_created(self, task: Task) -> None:
        """Prepend a newly created record."""
        with self._lock:
            self.tasks = (task, *self.tasks)

    def handle_updated(self, task: Task) -> None:
        """Replace the record with the same id, keeping order."""
        self._replace(task)

    def _replace(self, task: Task) -> None:
        with self._lock:
            self.tasks = tuple(task if existing.id == task.id else existing for existing in self.tasks)

    # -----------------------------------------------------------------
    # Delete
    # -----------------------------------------------------------------

    def delete(self, task_id: str, confirm: Callable[[Task], bool]) -> bool:
        """
        Delete a task after asking *confirm*.

        Args:
            task_id: Identifier of the task to delete.
            confirm: Receives the task; a false answer cancels the delete
                without any network call.

        Returns:
            True if the task was deleted and removed locally.

        Raises:
            TaskNotFoundError: If the task is not in the collection.
            SessionExpiredError: If the API rejected the credential.
        """
        task = self._require(task_id)
        if not confirm(task):
            logger.info("Delete of task %s cancelled", task_id)
            return False

        with self.in_flight(f"delete:{task_id}"):
            try:
                self.client.delete_task(task_id)
            except SessionExpiredError:
                raise
            except ApiError as error:
                if self._drop_if_disposed("delete"):
                    return False
                logger.error("Error deleting task %s: %s", task_id, error.message)
                self.notice = f"Could not delete task: {error.message}"
                return False

        if self._drop_if_disposed("delete"):
            return False
        with self._lock:
            self.tasks = tuple(existing for existing in self.tasks if existing.id != task_id)
        return True

    def request_delete(self, task_id: str) -> Task:
        """Ask for confirmation before deleting (rendered as a dialog)."""
        self.pending_delete = self._require(task_id)
        return self.pending_delete

    def resolve_delete(self, accepted: bool) -> bool:
        """Answer the pending confirmation; returns True if the task was deleted."""
        task, self.pending_delete = self.pending_delete, None
        if task is None:
            return False
        return self.delete(task.id, lambda _task: accepted)

    # -----------------------------------------------------------------
    # Status change
    # -----------------------------------------------------------------

    def change_status(self, task_id: str, status: TaskStatus | str) -> Task | None:
        """
        Change only the status of a task.

        The record the server returns replaces the local one as-is, so
        server-computed fields (``completedAt`` ...) are picked up.

        Returns:
            The server's record, or ``None`` if the status was invalid or
            the request failed (see :attr:`notice`).

        Raises:
            TaskNotFoundError: If the task is not in the collection.
            SessionExpiredError: If the API rejected the credential.
        """
        self._require(task_id)
        try:
            new_status = TaskStatus(status)
        except ValueError:
            self.notice = "Invalid status"
            return None

        with self.in_flight(f"status:{task_id}"):
            try:
                record = self.client.update_task(task_id, {"status": new_status.value})
            except SessionExpiredError:
                raise
            except ApiError as error:
                if self._drop_if_disposed("status"):
                    return None
                logger.error("Error updating task status %s: %s", task_id, error.message)
                self.notice = f"Could not update status: {error.message}"
                return None

        if self._drop_if_disposed("status"):
            return None
        self._replace(record)
        return record

    def dismiss_notice(self) -> None:
        self.notice = ""

    def dispose(self) -> None:
        self.close_editor()
        self.pending_delete = None
        super().dispose()
