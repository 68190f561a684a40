"""Organizer CLI - personal task tracker."""

import json
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path

import click

from .adapters.json_store import JsonTaskStore
from .config import Config, load_config
from .context import get_registry, init_registry, shutdown_registry
from .core.errors import NotFoundError, OrganizerError
from .core.report import format_task_detail
from .core.strategies import FilterKind, SortKind, apply_view
from .core.tasks import TaskUpdate, task_to_dict
from .views import TerminalView

PRIORITY_CHOICE = click.Choice(["High", "Medium", "Low"], case_sensitive=False)
SORT_CHOICE = click.Choice([k.value for k in SortKind])
FILTER_CHOICE = click.Choice([k.value for k in FilterKind])


def default_deadline(now: datetime | None = None) -> datetime:
    """Tomorrow at noon."""
    now = now or datetime.now()
    tomorrow = now + timedelta(days=1)
    return tomorrow.replace(hour=12, minute=0, second=0, microsecond=0)


def _fail(error: Exception | str) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="organizer")
@click.option(
    "--data-dir",
    envvar="ORGANIZER_DATA_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the task file (overrides DATA_DIR in organizer.conf)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to organizer.conf",
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--board", is_flag=True, help="Re-render the board after every change")
@click.pass_context
def main(ctx, data_dir: Path | None, config_path: Path | None, debug: bool, board: bool):
    """Organizer - personal task tracker."""
    config = load_config(config_path)
    if data_dir:
        config.data_dir = str(data_dir)

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else getattr(logging, config.log_level, logging.WARNING),
    )

    store = JsonTaskStore(config.resolved_data_dir(), config.resolved_export_dir())
    registry = init_registry(store)
    # Saves pending changes when the command finishes, even on error exits
    ctx.call_on_close(shutdown_registry)
    ctx.obj = config

    if board:
        registry.add_observer(TerminalView(config.default_filter, config.default_sort))


@main.command()
@click.argument("title")
@click.option("--description", "-d", default="", help="Optional description")
@click.option("--deadline", default=None, help="ISO-8601 deadline (default: tomorrow 12:00)")
@click.option("--priority", "-p", type=PRIORITY_CHOICE, default="Medium", show_default=True)
def add(title: str, description: str, deadline: str | None, priority: str):
    """Add a task."""
    try:
        task = get_registry().create(title, description, deadline or default_deadline(), priority)
    except OrganizerError as e:
        _fail(e)
    click.echo(f"✓ Task added: {task.title} ({task.id})")


@main.command()
@click.argument("task_id")
@click.option("--title", default=None)
@click.option("--description", "-d", default=None)
@click.option("--deadline", default=None, help="ISO-8601 deadline")
@click.option("--priority", "-p", type=PRIORITY_CHOICE, default=None)
def edit(task_id: str, title: str | None, description: str | None, deadline: str | None, priority: str | None):
    """Edit fields of a task."""
    changes = TaskUpdate(title=title, description=description, deadline=deadline, priority=priority)
    if changes.is_empty():
        _fail("Nothing to update. Pass at least one of --title, --description, --deadline, --priority.")
    try:
        task = get_registry().update(task_id, changes)
    except OrganizerError as e:
        _fail(e)
    click.echo(f"✓ Task updated: {task.title}")


@main.command()
@click.argument("task_id")
def done(task_id: str):
    """Mark a task as completed."""
    try:
        task = get_registry().complete(task_id)
    except OrganizerError as e:
        _fail(e)
    click.echo(f"✓ Task completed: {task.title}")


@main.command()
@click.argument("task_id")
def undo(task_id: str):
    """Mark a completed task as not completed."""
    try:
        task = get_registry().uncomplete(task_id)
    except OrganizerError as e:
        _fail(e)
    click.echo(f"✓ Task marked as incomplete: {task.title}")


@main.command("rm")
@click.argument("task_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def remove(task_id: str, yes: bool):
    """Delete a task."""
    registry = get_registry()
    task = registry.get_by_id(task_id)
    if task is None:
        _fail(NotFoundError(task_id))
    if not yes and not click.confirm(f'Delete "{task.title}"?'):
        return
    try:
        registry.delete(task_id)
    except OrganizerError as e:
        _fail(e)
    click.echo(f"✓ Task deleted: {task.title}")


@main.command()
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def clear(yes: bool):
    """Delete every task."""
    registry = get_registry()
    if not yes and not click.confirm(f"Delete all {len(registry)} tasks?"):
        return
    if not registry.clear():
        _fail("Tasks were cleared but could not be saved")
    click.echo("✓ All tasks cleared")


@main.command("list")
@click.option("--sort", "sort_key", type=SORT_CHOICE, default=None, help="Sort order")
@click.option("--filter", "filter_key", type=FILTER_CHOICE, default=None, help="Filter")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_tasks(config: Config, sort_key: str | None, filter_key: str | None, as_json: bool):
    """List tasks."""
    sort_key = sort_key or config.default_sort
    filter_key = filter_key or config.default_filter
    tasks = get_registry().get_all()

    if as_json:
        shown = apply_view(tasks, filter_key, sort_key)
        click.echo(json.dumps([task_to_dict(t) for t in shown], indent=2))
    else:
        TerminalView(filter_key, sort_key).receives(tasks)


@main.command()
@click.argument("task_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(task_id: str, as_json: bool):
    """Show one task."""
    task = get_registry().get_by_id(task_id)
    if task is None:
        _fail(NotFoundError(task_id))

    if as_json:
        click.echo(json.dumps(task_to_dict(task), indent=2))
    else:
        click.echo(f"ID: {task.id}")
        click.echo(format_task_detail(task))
        if task.is_overdue():
            click.echo("⚠ Overdue")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats(as_json: bool):
    """Show task statistics."""
    result = get_registry().statistics()

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(f"Total:         {result.total}")
        click.echo(f"Completed:     {result.completed}")
        click.echo(f"Pending:       {result.pending}")
        click.echo(f"High priority: {result.high_priority}")
        click.echo(f"Overdue:       {result.overdue}")


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="File to write (default: tasks_export_<timestamp>.txt in the export dir)",
)
def export(output: Path | None):
    """Export all tasks to a text report."""
    registry = get_registry()
    if len(registry) == 0:
        _fail("No tasks to export")

    path = registry.export_tasks(output)
    if path is None:
        _fail("Failed to export tasks")
    click.echo(f"✓ Exported {len(registry)} tasks to {path}")


if __name__ == "__main__":
    main()
