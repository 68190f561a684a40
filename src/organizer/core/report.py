"""Pure statistics and report formatting - no I/O dependencies."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from .tasks import Priority, Task

BANNER = "═" * 51
REPORT_TITLE = "Smart Task Organizer - Tasks Export"
TIMESTAMP_FORMAT = "%b %d, %Y %I:%M %p"

PRIORITY_MARKERS = {
    Priority.HIGH: "!!!",
    Priority.MEDIUM: "!! ",
    Priority.LOW: "!  ",
}


@dataclass
class TaskStatistics:
    """Aggregate counts over the current task collection."""

    total: int
    completed: int
    pending: int
    high_priority: int
    overdue: int

    def to_dict(self) -> dict[str, int]:
        """Serialized form, keyed the same camelCase way as task records."""
        return {
            "total": self.total,
            "completed": self.completed,
            "pending": self.pending,
            "highPriority": self.high_priority,
            "overdue": self.overdue,
        }


def compute_statistics(tasks: Sequence[Task], as_of: datetime | None = None) -> TaskStatistics:
    """
    Count totals for a task collection.

    Pure function - no I/O. Overdue means not completed and deadline before `as_of`.
    """
    as_of = as_of or datetime.now()
    total = len(tasks)
    completed = sum(1 for t in tasks if t.is_completed)
    return TaskStatistics(
        total=total,
        completed=completed,
        pending=total - completed,
        high_priority=sum(1 for t in tasks if t.priority == Priority.HIGH),
        overdue=sum(1 for t in tasks if t.is_overdue(as_of)),
    )


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def format_task_line(task: Task, as_of: datetime | None = None) -> str:
    """
    Format a single task for the terminal board.

    Pure function - no I/O.
    """
    as_of = as_of or datetime.now()
    check = "x" if task.is_completed else " "
    marker = PRIORITY_MARKERS[task.priority]
    badge = " OVERDUE" if task.is_overdue(as_of) else ""
    return (
        f"[{check}] [{marker}] {task.title} "
        f"(due {format_timestamp(task.deadline)}, {task.status.value}){badge}  {task.id}"
    )


def format_task_detail(task: Task) -> str:
    """Format one task as a labelled block, as used in the export report."""
    lines = [
        f"Title: {task.title}",
        f"Description: {task.description or 'No description'}",
        f"Priority: {task.priority.value}",
        f"Deadline: {format_timestamp(task.deadline)}",
        f"Status: {task.status.value}",
        f"Created: {format_timestamp(task.created_at)}",
    ]
    return "\n".join(lines)


def format_export_report(tasks: Sequence[Task], exported_at: datetime | None = None) -> str:
    """
    Render the human-readable export report.

    Pure function - no I/O. Header with export time and counts, then one
    numbered block per task in the given order.
    """
    exported_at = exported_at or datetime.now()
    stats = compute_statistics(tasks, exported_at)

    sections = [
        f"{BANNER}\n{REPORT_TITLE:^51}\n{BANNER}\n",
        f"Export Date: {format_timestamp(exported_at)}\n"
        f"Total Tasks: {stats.total}\n"
        f"Completed: {stats.completed}\n"
        f"Pending: {stats.pending}\n",
    ]
    for index, task in enumerate(tasks, start=1):
        sections.append(f"[Task #{index}]\n{format_task_detail(task)}\n")

    return "\n".join(sections)
