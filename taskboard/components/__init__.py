"""UI components: session gate, task list controller, task editor."""

from .base import Component, RequestInFlightError
from .session_gate import SessionGate
from .task_editor import TaskEditor
from .task_list import TaskListController, TaskNotFoundError

__all__ = [
    "Component",
    "RequestInFlightError",
    "SessionGate",
    "TaskEditor",
    "TaskListController",
    "TaskNotFoundError",
]
