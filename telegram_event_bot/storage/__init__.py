"""Per-key persistence backends."""

from .base import JsonStorage, KeyValueStorage, RedisStorage, SQLiteStorage
from .factory import create_storage

__all__ = ["JsonStorage", "KeyValueStorage", "RedisStorage", "SQLiteStorage", "create_storage"]
