"""
Shared lifecycle for UI components.

Every component (session gate, task list, task editor) keeps its own local
state and calls the remote API synchronously from a request thread.  A
browser may fire several requests at once, so each component tracks:

- which actions are currently in flight, rejecting a duplicate dispatch
  of the same action (the rendered submit control is disabled meanwhile);
- whether it is still alive.  Once disposed (editor closed, user logged
  out) a response that arrives late is dropped instead of applied.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class RequestInFlightError(Exception):
    """The same action was dispatched again before its request finished."""

    def __init__(self, action: str):
        super().__init__(f"'{action}' is already in progress")
        self.action = action


class Component:
    """Base class providing in-flight tracking and a liveness flag."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._in_flight: set[str] = set()
        self._alive = True

    @property
    def alive(self) -> bool:
        return self._alive

    def is_in_flight(self, action: str) -> bool:
        with self._lock:
            return action in self._in_flight

    @contextmanager
    def in_flight(self, action: str) -> Iterator[None]:
        """
        Mark *action* as in flight for the duration of the block.

        Raises:
            RequestInFlightError: If *action* is already in flight.
        """
        with self._lock:
            if action in self._in_flight:
                raise RequestInFlightError(action)
            self._in_flight.add(action)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(action)

    def dispose(self) -> None:
        """Mark the component dead; late responses are ignored from now on."""
        self._alive = False

    def _drop_if_disposed(self, action: str) -> bool:
        if self._alive:
            return False
        logger.debug("Dropping late response for %s on disposed %s", action, type(self).__name__)
        return True
