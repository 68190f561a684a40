"""JSON file task storage adapter."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from organizer.core.errors import StorageError
from organizer.core.report import format_export_report
from organizer.core.tasks import Task, task_to_dict

logger = logging.getLogger(__name__)

STORAGE_KEY = "smart_task_organizer_tasks"


class JsonTaskStore:
    """
    JSON file task storage.

    Implements TaskStore protocol. The whole collection lives in one file named
    after STORAGE_KEY; every save replaces it entirely.
    """

    def __init__(self, data_dir: Path | str, export_dir: Path | str | None = None):
        self.data_dir = Path(data_dir).expanduser()
        self.export_dir = Path(export_dir).expanduser() if export_dir else self.data_dir / "exports"

    @property
    def path(self) -> Path:
        return self.data_dir / f"{STORAGE_KEY}.json"

    def _read_blob(self) -> list[dict[str, Any]] | None:
        """Read the raw blob. Returns None if nothing is stored."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e
        if not isinstance(data, list):
            raise StorageError(f"Expected a list of tasks in {self.path}, got {type(data).__name__}")
        return [record for record in data if isinstance(record, dict)]

    def _write_blob(self, records: list[dict[str, Any]]) -> None:
        """Write the blob through a temp file so a failed write keeps the old one."""
        try:
            payload = json.dumps(records, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Failed to serialize tasks: {e}") from e
        tmp_path = self.path.with_suffix(".json.tmp")
        try:
            data = payload.encode("utf-8")
            self.data_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(data)
            tmp_path.replace(self.path)
        except (OSError, UnicodeError) as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    def load(self) -> list[dict[str, Any]]:
        """Load raw task records. Returns [] if nothing is stored or the blob is unparsable."""
        try:
            records = self._read_blob()
        except StorageError as e:
            logger.error(f"Error loading tasks: {e}")
            return []
        if records is None:
            logger.info("No saved tasks found")
            return []
        logger.info(f"Loaded {len(records)} tasks from {self.path}")
        return records

    def save(self, tasks: list[Task]) -> bool:
        """Overwrite the stored blob. Returns False on failure."""
        try:
            self._write_blob([task_to_dict(t) for t in tasks])
        except StorageError as e:
            logger.error(f"Error saving tasks: {e}")
            return False
        logger.debug(f"Saved {len(tasks)} tasks to {self.path}")
        return True

    def export_to_file(self, tasks: list[Task], destination: Path | None = None) -> Path | None:
        """
        Write the text report for `tasks`.

        Defaults to tasks_export_<epoch-ms>.txt in the export directory.
        Returns the written path, or None on failure.
        """
        now = datetime.now()
        if destination is None:
            destination = self.export_dir / f"tasks_export_{int(now.timestamp() * 1000)}.txt"
        destination = Path(destination).expanduser()

        try:
            data = format_export_report(tasks, now).encode("utf-8")
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(data)
        except (OSError, UnicodeError) as e:
            logger.error(f"Error exporting tasks to {destination}: {e}")
            return None

        logger.info(f"Exported {len(tasks)} tasks to {destination}")
        return destination
