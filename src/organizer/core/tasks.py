"""Pure task domain logic - no I/O dependencies."""

import random
import string
from collections.abc import Mapping
from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any

from .errors import ValidationError

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_SUFFIX_LENGTH = 9


class Priority(Enum):
    """Task priority, ordered High > Medium > Low."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        """Sort rank: 0 for High, 2 for Low."""
        return list(Priority).index(self)

    @classmethod
    def parse(cls, raw: "Priority | str | None") -> "Priority":
        """Parse a priority value case-insensitively."""
        if isinstance(raw, cls):
            return raw
        if raw is None or not str(raw).strip():
            raise ValidationError("Priority is required")
        wanted = str(raw).strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ValidationError(f"Unknown priority: {raw!r} (expected High, Medium or Low)")


class Status(Enum):
    """Task completion status."""

    TODO = "ToDo"
    COMPLETED = "Completed"

    @classmethod
    def parse(cls, raw: "Status | str | None") -> "Status":
        if isinstance(raw, cls):
            return raw
        if raw is None or not str(raw).strip():
            raise ValidationError("Status is required")
        wanted = str(raw).strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ValidationError(f"Unknown status: {raw!r} (expected ToDo or Completed)")


def parse_timestamp(value: datetime | str | None, field_name: str = "Deadline") -> datetime:
    """
    Parse an ISO-8601 timestamp into a naive local datetime.

    Aware values are converted to local time so that every timestamp in the
    process compares against every other one.
    """
    if value is None:
        raise ValidationError(f"{field_name} is required")

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            raise ValidationError(f"{field_name} is required")
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise ValidationError(f"{field_name} is not an ISO-8601 timestamp: {value!r}") from e

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _require_encodable(text: str, field_name: str) -> str:
    """Reject text that cannot be stored as UTF-8, such as lone surrogates."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValidationError(f"{field_name} contains characters that cannot be stored") from e
    return text


def _clean_title(title: str | None) -> str:
    if title is None or not str(title).strip():
        raise ValidationError("Title is required")
    return _require_encodable(str(title).strip(), "Title")


def _clean_description(description: str | None) -> str:
    if not description:
        return ""
    return _require_encodable(str(description).strip(), "Description")


@dataclass
class Task:
    """A single trackable to-do item."""

    id: str
    title: str
    deadline: datetime
    priority: Priority
    created_at: datetime
    description: str = ""
    status: Status = Status.TODO

    @property
    def is_completed(self) -> bool:
        return self.status == Status.COMPLETED

    def is_overdue(self, as_of: datetime | None = None) -> bool:
        """Not completed and deadline strictly before `as_of`."""
        as_of = as_of or datetime.now()
        return not self.is_completed and self.deadline < as_of


@dataclass
class TaskUpdate:
    """
    Partial update for a task.

    Only the fields listed here may change; `None` means "not provided".
    An empty description string is a real value and clears the description.
    """

    title: str | None = None
    description: str | None = None
    deadline: datetime | str | None = None
    priority: Priority | str | None = None
    status: Status | str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TaskUpdate":
        """Build an update from a loose mapping, ignoring id, createdAt and unknown keys."""
        allowed = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in allowed})

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def resolve(self) -> dict[str, Any]:
        """
        Validate every provided field and return the normalized values.

        Raises ValidationError before anything is applied, so a failed update
        never leaves a task half-changed.
        """
        resolved: dict[str, Any] = {}
        if self.title is not None:
            resolved["title"] = _clean_title(self.title)
        if self.description is not None:
            resolved["description"] = _clean_description(self.description)
        if self.deadline is not None:
            resolved["deadline"] = parse_timestamp(self.deadline, "Deadline")
        if self.priority is not None:
            resolved["priority"] = Priority.parse(self.priority)
        if self.status is not None:
            resolved["status"] = Status.parse(self.status)
        return resolved


# ============== Factory ==============


def generate_task_id(now: datetime | None = None) -> str:
    """Millisecond timestamp plus a random base36 suffix, e.g. task_1735732800000_k3j9x0a1b."""
    now = now or datetime.now()
    millis = int(now.timestamp() * 1000)
    suffix = "".join(random.choices(ID_ALPHABET, k=ID_SUFFIX_LENGTH))
    return f"task_{millis}_{suffix}"


def create_task(
    title: str | None,
    description: str | None,
    deadline: datetime | str | None,
    priority: Priority | str | None,
    now: datetime | None = None,
) -> Task:
    """Create a fresh task with a generated id, status ToDo and created_at=now."""
    now = now or datetime.now()
    return Task(
        id=generate_task_id(now),
        title=_clean_title(title),
        description=_clean_description(description),
        deadline=parse_timestamp(deadline, "Deadline"),
        priority=Priority.parse(priority),
        created_at=now,
        status=Status.TODO,
    )


def task_from_dict(data: Mapping[str, Any]) -> Task:
    """Reconstruct a persisted task, preserving its id, status and createdAt."""
    task_id = data.get("id")
    if not task_id or not str(task_id).strip():
        raise ValidationError("Task id is required")

    created_raw = data.get("createdAt", data.get("created_at"))
    raw_status = data.get("status")

    return Task(
        id=str(task_id),
        title=_clean_title(data.get("title")),
        description=_clean_description(data.get("description")),
        deadline=parse_timestamp(data.get("deadline"), "Deadline"),
        priority=Priority.parse(data.get("priority")),
        created_at=parse_timestamp(created_raw, "createdAt"),
        status=Status.parse(raw_status) if raw_status else Status.TODO,
    )


def task_to_dict(task: Task) -> dict[str, Any]:
    """Serialize a task to its persisted record."""
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "deadline": task.deadline.isoformat(),
        "priority": task.priority.value,
        "status": task.status.value,
        "createdAt": task.created_at.isoformat(),
    }
