"""Functional core - pure business logic with no I/O."""

from .errors import NotFoundError, OrganizerError, StorageError, ValidationError
from .tasks import (
    Priority,
    Status,
    Task,
    TaskUpdate,
    create_task,
    task_from_dict,
    task_to_dict,
)
from .strategies import FilterKind, SortKind, apply_view
from .report import TaskStatistics, compute_statistics, format_export_report

__all__ = [
    # Errors
    "OrganizerError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    # Tasks
    "Priority",
    "Status",
    "Task",
    "TaskUpdate",
    "create_task",
    "task_from_dict",
    "task_to_dict",
    # Strategies
    "FilterKind",
    "SortKind",
    "apply_view",
    # Report
    "TaskStatistics",
    "compute_statistics",
    "format_export_report",
]
