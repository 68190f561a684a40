"""
Sort and filter strategies over task lists.

Each strategy is a pure function; the closed FilterKind/SortKind enums select
one through an exhaustive match. Unknown keys fall back to FilterKind.ALL and
SortKind.DEADLINE rather than failing.
"""

from collections.abc import Callable, Sequence
from datetime import datetime
from enum import Enum
from functools import partial

from .tasks import Priority, Task

TaskTransform = Callable[[Sequence[Task]], list[Task]]


class FilterKind(Enum):
    ALL = "all"
    COMPLETED = "completed"
    NOT_COMPLETED = "notCompleted"
    HIGH_PRIORITY = "highPriority"
    OVERDUE = "overdue"

    @classmethod
    def from_key(cls, key: "str | FilterKind | None") -> "FilterKind":
        if isinstance(key, cls):
            return key
        try:
            return cls(key)
        except ValueError:
            return cls.ALL


class SortKind(Enum):
    DEADLINE = "deadline"
    PRIORITY = "priority"
    CREATED = "created"

    @classmethod
    def from_key(cls, key: "str | SortKind | None") -> "SortKind":
        if isinstance(key, cls):
            return key
        try:
            return cls(key)
        except ValueError:
            return cls.DEADLINE


# ============== Filters ==============


def filter_all(tasks: Sequence[Task]) -> list[Task]:
    return list(tasks)


def filter_completed(tasks: Sequence[Task]) -> list[Task]:
    return [t for t in tasks if t.is_completed]


def filter_not_completed(tasks: Sequence[Task]) -> list[Task]:
    return [t for t in tasks if not t.is_completed]


def filter_high_priority(tasks: Sequence[Task]) -> list[Task]:
    return [t for t in tasks if t.priority == Priority.HIGH]


def filter_overdue(tasks: Sequence[Task], as_of: datetime | None = None) -> list[Task]:
    """Filter to tasks that are not completed and past their deadline."""
    as_of = as_of or datetime.now()
    return [t for t in tasks if t.is_overdue(as_of)]


# ============== Sorts ==============
# sorted() is stable, so ties keep their input order.


def sort_by_deadline(tasks: Sequence[Task]) -> list[Task]:
    """Earliest deadline first."""
    return sorted(tasks, key=lambda t: t.deadline)


def sort_by_priority(tasks: Sequence[Task]) -> list[Task]:
    """High, then Medium, then Low."""
    return sorted(tasks, key=lambda t: t.priority.rank)


def sort_by_created(tasks: Sequence[Task]) -> list[Task]:
    """Newest first."""
    return sorted(tasks, key=lambda t: t.created_at, reverse=True)


# ============== Selection ==============


def filter_strategy(kind: FilterKind, as_of: datetime | None = None) -> TaskTransform:
    match kind:
        case FilterKind.ALL:
            return filter_all
        case FilterKind.COMPLETED:
            return filter_completed
        case FilterKind.NOT_COMPLETED:
            return filter_not_completed
        case FilterKind.HIGH_PRIORITY:
            return filter_high_priority
        case FilterKind.OVERDUE:
            return partial(filter_overdue, as_of=as_of)
    raise AssertionError(f"Unhandled filter kind: {kind}")


def sort_strategy(kind: SortKind) -> TaskTransform:
    match kind:
        case SortKind.DEADLINE:
            return sort_by_deadline
        case SortKind.PRIORITY:
            return sort_by_priority
        case SortKind.CREATED:
            return sort_by_created
    raise AssertionError(f"Unhandled sort kind: {kind}")


def apply_view(
    tasks: Sequence[Task],
    filter_key: "str | FilterKind | None" = FilterKind.ALL,
    sort_key: "str | SortKind | None" = SortKind.DEADLINE,
    as_of: datetime | None = None,
) -> list[Task]:
    """
    Filter, then sort.

    Pure function - no I/O. Never reorders or mutates the input sequence.
    """
    selected = filter_strategy(FilterKind.from_key(filter_key), as_of)(tasks)
    return sort_strategy(SortKind.from_key(sort_key))(selected)
