"""Terminal rendering of the task board."""

from collections.abc import Callable
from datetime import datetime

import click

from .core.report import format_task_line
from .core.strategies import FilterKind, SortKind, apply_view
from .core.tasks import Task


class TerminalView:
    """
    Task board rendered with click.echo.

    Implements TaskObserver protocol: every snapshot it receives is filtered,
    sorted and printed in full.
    """

    def __init__(
        self,
        filter_key: str | FilterKind = FilterKind.ALL,
        sort_key: str | SortKind = SortKind.DEADLINE,
        clock: Callable[[], datetime] = datetime.now,
        echo: Callable[[str], None] = click.echo,
    ):
        self.filter_kind = FilterKind.from_key(filter_key)
        self.sort_kind = SortKind.from_key(sort_key)
        self._clock = clock
        self._echo = echo
        self.current: list[Task] = []

    def receives(self, tasks: list[Task]) -> None:
        self.current = tasks
        self.render()

    def visible_tasks(self) -> list[Task]:
        return apply_view(self.current, self.filter_kind, self.sort_kind, self._clock())

    def render(self) -> None:
        now = self._clock()
        shown = self.visible_tasks()
        if not shown:
            self._echo("No tasks to show.")
        for task in shown:
            self._echo(format_task_line(task, now))
        self._echo(
            f"-- {len(shown)} of {len(self.current)} tasks "
            f"(filter: {self.filter_kind.value}, sort: {self.sort_kind.value})"
        )
