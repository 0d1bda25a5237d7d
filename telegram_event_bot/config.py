from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger("telegram_event_bot.config")

STORAGE_BACKENDS = ("json", "sqlite", "redis")


class ConfigError(RuntimeError):
    """Raised when application configuration is invalid."""


@dataclass(slots=True)
class BotConfig:
    token: str
    data_dir: Path
    logs_dir: Path
    event_channel_id: int | None = None
    authorized_users: tuple[int, ...] = ()
    storage_backend: str = "json"
    sqlite_path: Path | None = None
    redis_url: str = "redis://localhost:6379/0"
    misfire_grace_seconds: int = 300
    click_window_seconds: float = 3.0


@dataclass(slots=True)
class NetworkConfig:
    request_timeout: float = 10.0
    ui_retries: int = 2
    ui_read_timeout: float = 5.0
    ui_jitter_min: float = 0.2
    ui_jitter_max: float = 0.6
    heavy_max_retries: int = 5
    heavy_backoff_start: float = 1.0
    heavy_backoff_cap: float = 15.0


@dataclass(slots=True)
class Config:
    bot: BotConfig
    network: NetworkConfig = field(default_factory=NetworkConfig)


def _read_int(name: str, default: int | None, *, min_value: int | None = None) -> int | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer") from exc
    if min_value is not None and value < min_value:
        raise ConfigError(f"{name} must be >= {min_value}")
    return value


def parse_authorized_users(raw: str | None) -> tuple[int, ...]:
    """Parse the comma separated allow-list of user ids.

    Entries are trimmed and empty ones dropped. Values that are not integers
    cannot be Telegram user ids and are ignored with a warning.
    """

    if not raw:
        return tuple()
    users: list[int] = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        try:
            user_id = int(item)
        except ValueError:
            logger.warning("Ignoring invalid authorized user id: %s", item)
            continue
        if user_id not in users:
            users.append(user_id)
    return tuple(users)


def load_config() -> Config:
    token = os.environ.get("BOT_TOKEN", "").strip()

    base_dir = Path(os.environ.get("BOT_BASE_DIR", Path.cwd()))
    data_dir = Path(os.environ.get("BOT_DATA_DIR", base_dir / "data"))
    logs_dir = Path(os.environ.get("BOT_LOG_DIR", base_dir / "logs"))

    storage_backend = os.environ.get("BOT_STORAGE_BACKEND", "json").strip().lower()
    if storage_backend not in STORAGE_BACKENDS:
        raise ConfigError(f"BOT_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}")
    sqlite_path_env = os.environ.get("BOT_SQLITE_PATH")
    sqlite_path = Path(sqlite_path_env) if sqlite_path_env else None

    bot_config = BotConfig(
        token=token,
        data_dir=data_dir,
        logs_dir=logs_dir,
        event_channel_id=_read_int("EVENT_CHANNEL_ID", None),
        authorized_users=parse_authorized_users(os.environ.get("AUTHORIZED_USERS")),
        storage_backend=storage_backend,
        sqlite_path=sqlite_path,
        redis_url=os.environ.get("BOT_REDIS_URL", "redis://localhost:6379/0"),
        misfire_grace_seconds=_read_int("BOT_MISFIRE_GRACE_SECONDS", 300, min_value=1),
    )
    return Config(bot=bot_config, network=NetworkConfig())
