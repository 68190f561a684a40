"""Task persistence interface."""

from pathlib import Path
from typing import Any, Protocol

from organizer.core.tasks import Task


class TaskStore(Protocol):
    """Interface for persisting the full task collection as one blob."""

    def load(self) -> list[dict[str, Any]]:
        """Load raw task records. Returns [] if nothing is stored or the blob is unparsable."""
        ...

    def save(self, tasks: list[Task]) -> bool:
        """Overwrite the stored blob with `tasks`. Returns False on failure."""
        ...

    def export_to_file(self, tasks: list[Task], destination: Path | None = None) -> Path | None:
        """Write a human-readable report. Returns the file path, or None on failure."""
        ...
