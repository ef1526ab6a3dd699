"""
Client-side data models.

Defines the enum types that mirror the task API's data contract, the
immutable ``Task`` record held in the task list, and the ``Session`` that
pairs an authenticated identity with its bearer credential.

Both enums inherit from ``str`` as well as ``Enum`` so that their values
serialise naturally to JSON strings and can be compared directly against
plain strings returned by the task API without explicit ``.value`` access.

Key Concepts Demonstrated:
- ``str``/``Enum`` dual inheritance for ergonomic serialisation
- Frozen dataclasses so records are replaced, never mutated in place
- Explicit session lifecycle (acquired at login, released at logout)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

# Server-side identifier keys, in lookup order.
ID_KEYS = ("_id", "id")

_KNOWN_FIELDS = {*ID_KEYS, "title", "description", "status", "priority", "dueDate"}


class TaskStatus(str, Enum):
    """
    Task lifecycle statuses (mirrors the task API contract).

    Attributes:
        PENDING: Task has been created but work has not started.
        IN_PROGRESS: Task is actively being worked on.
        COMPLETED: Task has been finished.
    """

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()


class TaskPriority(str, Enum):
    """
    Task priority levels (mirrors the task API contract).

    Attributes:
        LOW: Low urgency.
        MEDIUM: Normal urgency (default for new tasks).
        HIGH: High urgency.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def label(self) -> str:
        return f"{self.value.title()} Priority"


def parse_due_date(value: Any) -> date | None:
    """
    Parse a due date returned by the task API into a calendar date.

    Accepts a plain ``YYYY-MM-DD`` date or a full ISO-8601 datetime.  The
    ``Z`` suffix is replaced with the equivalent ``+00:00`` offset that
    :meth:`datetime.fromisoformat` understands, and aware datetimes are
    converted to UTC before the date part is taken.

    Args:
        value: The raw ``dueDate`` value, or ``None``/empty.

    Returns:
        A :class:`date`, or ``None`` if the input was empty.

    Raises:
        ValueError: If the value is not a recognisable ISO-8601 string.
    """
    if not value:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Invalid due date: {value!r}")
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


@dataclass(frozen=True)
class Task:
    """
    A task record as last confirmed by the server.

    Instances are frozen: the identifier never changes once assigned, and
    the task list reconciles by swapping whole records.

    Attributes:
        id: Opaque server-assigned identifier.
        title: Short, non-empty summary.
        description: Optional longer text.
        status: Current lifecycle status (see ``TaskStatus``).
        priority: Importance level (see ``TaskPriority``).
        due_date: Optional calendar date.
        extra: Every other field the server sent (``createdAt``,
            ``completedAt`` ...), kept verbatim.
    """

    id: str
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = None
    extra: dict[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Task:
        """
        Build a task from a JSON record returned by the task API.

        Missing ``status``/``priority`` fall back to ``pending``/``medium``;
        values outside the enumerations are rejected rather than carried.

        Raises:
            ValueError: If the record has no identifier, no title, an
                unknown status/priority, or an unparseable due date.
        """
        if not isinstance(data, dict):
            raise ValueError("Task record must be a JSON object")

        raw_id = next((data[key] for key in ID_KEYS if data.get(key) is not None), None)
        if raw_id is None:
            raise ValueError("Task record has no identifier")

        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValueError("Task record has no title")

        return cls(
            id=str(raw_id),
            title=title,
            description=data.get("description") or None,
            status=TaskStatus(data.get("status") or TaskStatus.PENDING.value),
            priority=TaskPriority(data.get("priority") or TaskPriority.MEDIUM.value),
            due_date=parse_due_date(data.get("dueDate")),
            extra={key: value for key, value in data.items() if key not in _KNOWN_FIELDS},
        )

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"


@dataclass
class Session:
    """
    An authenticated identity paired with its bearer credential.

    Created by the session gate after a successful login or registration,
    passed explicitly to everything that calls the task API, and released
    on logout.

    Attributes:
        identity: The ``user`` object returned by the auth endpoint.  Only
            ``username`` is interpreted here.
        token: Bearer credential attached to every task API call.
        expires_at: Expiry read from the token, when it carries one.
    """

    identity: dict[str, Any]
    token: str
    expires_at: datetime | None = None
    released: bool = False

    @property
    def username(self) -> str:
        return str(self.identity.get("username", ""))

    @property
    def active(self) -> bool:
        """True until the session is released or its credential expires."""
        if self.released:
            return False
        if self.expires_at is None:
            return True
        return datetime.now(timezone.utc) < self.expires_at

    def release(self) -> None:
        self.released = True
