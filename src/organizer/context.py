"""
Process-wide registry context.

Exactly one TaskRegistry is active per process. The composition root (the CLI)
calls init_registry() once at startup and shutdown_registry() on exit; every
other component reaches the registry through get_registry().
"""

import logging
from collections.abc import Callable
from datetime import datetime

from .ports import TaskStore
from .registry import TaskRegistry

logger = logging.getLogger(__name__)

_active: TaskRegistry | None = None


def init_registry(store: TaskStore, clock: Callable[[], datetime] = datetime.now) -> TaskRegistry:
    """Create and load the process registry."""
    global _active
    if _active is not None:
        raise RuntimeError("Task registry is already initialized")
    _active = TaskRegistry(store, clock=clock)
    _active.load()
    return _active


def get_registry() -> TaskRegistry:
    if _active is None:
        raise RuntimeError("Task registry is not initialized; call init_registry() first")
    return _active


def shutdown_registry() -> bool:
    """
    Release the active registry, saving it first if it holds unsaved changes.

    Returns True when the stored blob matches the registry on exit.
    """
    global _active
    if _active is None:
        return False
    registry, _active = _active, None
    if not registry.has_unsaved_changes:
        return True
    logger.debug("Saving tasks before shutdown")
    return registry.save()
