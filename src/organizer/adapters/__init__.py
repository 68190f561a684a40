"""Adapters - I/O implementations of ports."""

from .json_store import STORAGE_KEY, JsonTaskStore

__all__ = [
    "STORAGE_KEY",
    "JsonTaskStore",
]
