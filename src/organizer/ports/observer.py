"""Task observer interface."""

from typing import Protocol

from organizer.core.tasks import Task


class TaskObserver(Protocol):
    """Anything that wants the full task snapshot after every change."""

    def receives(self, tasks: list[Task]) -> None:
        """Receive a snapshot. The list and its tasks are copies owned by the observer."""
        ...
