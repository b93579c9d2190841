"""Persistence helpers: local key/value storage and JSON exports."""

from .json_writer import JsonStore
from .local_storage import LocalStorage, MemoryStorage

__all__ = ["JsonStore", "LocalStorage", "MemoryStorage"]
