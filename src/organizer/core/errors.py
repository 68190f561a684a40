"""Error taxonomy for the organizer."""


class OrganizerError(Exception):
    """Base class for all organizer errors."""

    pass


class ValidationError(OrganizerError):
    """Raised when a required task field is missing or invalid."""

    pass


class NotFoundError(OrganizerError):
    """Raised when an operation targets a task id that does not exist."""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class StorageError(OrganizerError):
    """Raised when the task blob cannot be read, written or serialized."""

    pass
