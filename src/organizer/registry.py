"""Task registry - the single owner of all tasks in the process."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any

from .core.errors import NotFoundError, ValidationError
from .core.report import TaskStatistics, compute_statistics
from .core.tasks import Priority, Status, Task, TaskUpdate, create_task, task_from_dict
from .ports import TaskObserver, TaskStore

logger = logging.getLogger(__name__)


class TaskRegistry:
    """
    In-memory task collection with persistence and observer fan-out.

    Every mutation runs synchronously: change the collection, save through the
    store, then notify observers with a fresh snapshot. Callers and observers
    only ever see copies of the stored tasks.
    """

    def __init__(self, store: TaskStore, clock: Callable[[], datetime] = datetime.now):
        self._store = store
        self._clock = clock
        self._tasks: list[Task] = []
        self._observers: list[TaskObserver] = []
        self._unsaved = False

    def __len__(self) -> int:
        return len(self._tasks)

    # ============== Observers ==============

    def add_observer(self, observer: TaskObserver) -> None:
        if observer in self._observers:
            return
        self._observers.append(observer)
        logger.debug(f"Observer registered: {observer!r}")

    def remove_observer(self, observer: TaskObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def notify(self) -> None:
        """Deliver a snapshot to each observer in registration order."""
        for observer in list(self._observers):
            try:
                observer.receives(self._snapshot())
            except Exception:
                logger.exception(f"Observer {observer!r} failed; continuing with the rest")

    def _snapshot(self) -> list[Task]:
        return [replace(t) for t in self._tasks]

    # ============== CRUD ==============

    def _find(self, task_id: str) -> Task:
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise NotFoundError(task_id)

    def _commit(self) -> None:
        self.save()
        self.notify()

    def create(
        self,
        title: str | None,
        description: str | None,
        deadline: datetime | str | None,
        priority: Priority | str | None,
    ) -> Task:
        """Create a task, persist, notify, and return a copy of it."""
        if not title or not deadline or not priority:
            raise ValidationError("Title, deadline, and priority are required")

        task = create_task(title, description, deadline, priority, now=self._clock())
        self._tasks.append(task)
        self._commit()

        logger.info(f"Task created: {task.title} ({task.id})")
        return replace(task)

    def update(self, task_id: str, changes: TaskUpdate | Mapping[str, Any]) -> Task:
        """
        Apply only the provided fields to an existing task.

        id and created_at are never touched. All provided values are validated
        before any of them is applied.
        """
        task = self._find(task_id)
        if not isinstance(changes, TaskUpdate):
            changes = TaskUpdate.from_dict(changes)

        for name, value in changes.resolve().items():
            setattr(task, name, value)
        self._commit()

        logger.info(f"Task updated: {task.title} ({task.id})")
        return replace(task)

    def delete(self, task_id: str) -> bool:
        task = self._find(task_id)
        self._tasks.remove(task)
        self._commit()

        logger.info(f"Task deleted: {task.title} ({task.id})")
        return True

    def complete(self, task_id: str) -> Task:
        return self.update(task_id, TaskUpdate(status=Status.COMPLETED))

    def uncomplete(self, task_id: str) -> Task:
        return self.update(task_id, TaskUpdate(status=Status.TODO))

    def clear(self) -> bool:
        """Remove every task. Returns whether the empty collection was saved."""
        self._tasks = []
        saved = self.save()
        self.notify()
        logger.info("All tasks cleared")
        return saved

    # ============== Queries ==============

    def get_all(self) -> list[Task]:
        """Copies of all tasks, in insertion order."""
        return self._snapshot()

    def get_by_id(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return replace(task)
        return None

    def statistics(self) -> TaskStatistics:
        return compute_statistics(self._tasks, self._clock())

    # ============== Storage ==============

    @property
    def has_unsaved_changes(self) -> bool:
        """True when a mutation has not yet been written successfully."""
        return self._unsaved

    def load(self) -> list[Task]:
        """
        Replace the collection with the store's contents.

        Never raises: a store failure yields an empty collection, and a record
        that cannot be rebuilt is skipped. Observers are always notified.
        """
        try:
            records = list(self._store.load() or [])
        except Exception:
            logger.exception("Error loading tasks; starting with an empty collection")
            records = []

        tasks = []
        for record in records:
            if not isinstance(record, Mapping):
                logger.warning(f"Skipping task record that is not an object: {record!r}")
                continue
            try:
                tasks.append(task_from_dict(record))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable task record {record.get('id')!r}: {e}")

        self._tasks = tasks
        self._unsaved = False
        self.notify()

        logger.info(f"Loaded {len(self._tasks)} tasks")
        return self._snapshot()

    def save(self) -> bool:
        """Persist the collection. Never raises; returns False on failure."""
        try:
            saved = bool(self._store.save(self._snapshot()))
        except Exception:
            logger.exception("Error saving tasks")
            saved = False
        self._unsaved = not saved
        return saved

    def export_tasks(self, destination: Path | None = None) -> Path | None:
        """Write the text report. Returns its path, or None on failure."""
        try:
            path = self._store.export_to_file(self._snapshot(), destination)
        except Exception:
            logger.exception("Error exporting tasks")
            return None
        if path is None:
            logger.error("Error exporting tasks")
        return path
