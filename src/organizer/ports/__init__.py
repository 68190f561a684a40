"""Ports - interfaces/protocols for external dependencies."""

from .task_store import TaskStore
from .observer import TaskObserver

__all__ = [
    "TaskStore",
    "TaskObserver",
]
