from __future__ import annotations

from ..config import BotConfig
from ..storage.base import JsonStorage, KeyValueStorage, RedisStorage, SQLiteStorage


def create_storage(config: BotConfig, name: str) -> KeyValueStorage:
    if config.storage_backend == "sqlite":
        db_path = config.sqlite_path or config.data_dir / "bot.db"
        table = name.replace("-", "_")
        return SQLiteStorage(db_path, table)
    if config.storage_backend == "redis":
        return RedisStorage(config.redis_url, name)
    path = config.data_dir / f"{name}.json"
    return JsonStorage(path)
