from pathlib import Path

import pytest

from telegram_event_bot.config import ConfigError, load_config, parse_authorized_users

ENV_VARS = (
    "BOT_TOKEN",
    "EVENT_CHANNEL_ID",
    "AUTHORIZED_USERS",
    "BOT_BASE_DIR",
    "BOT_DATA_DIR",
    "BOT_LOG_DIR",
    "BOT_STORAGE_BACKEND",
    "BOT_SQLITE_PATH",
    "BOT_REDIS_URL",
    "BOT_MISFIRE_GRACE_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_parse_authorized_users_trims_and_drops_garbage():
    assert parse_authorized_users(" 111, 222,,abc, 111 ,") == (111, 222)
    assert parse_authorized_users("") == ()
    assert parse_authorized_users(None) == ()


def test_load_config_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("BOT_BASE_DIR", str(tmp_path))
    config = load_config()
    assert config.bot.token == ""
    assert config.bot.data_dir == Path(tmp_path) / "data"
    assert config.bot.logs_dir == Path(tmp_path) / "logs"
    assert config.bot.event_channel_id is None
    assert config.bot.authorized_users == ()
    assert config.bot.storage_backend == "json"
    assert config.bot.redis_url == "redis://localhost:6379/0"
    assert config.bot.misfire_grace_seconds == 300


def test_load_config_reads_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("BOT_TOKEN", " 123:abc ")
    monkeypatch.setenv("EVENT_CHANNEL_ID", "-1001234567890")
    monkeypatch.setenv("AUTHORIZED_USERS", "1,2")
    monkeypatch.setenv("BOT_STORAGE_BACKEND", "SQLite")
    monkeypatch.setenv("BOT_SQLITE_PATH", str(tmp_path / "events.db"))
    monkeypatch.setenv("BOT_MISFIRE_GRACE_SECONDS", "60")
    config = load_config()
    assert config.bot.token == "123:abc"
    assert config.bot.event_channel_id == -1001234567890
    assert config.bot.authorized_users == (1, 2)
    assert config.bot.storage_backend == "sqlite"
    assert config.bot.sqlite_path == tmp_path / "events.db"
    assert config.bot.misfire_grace_seconds == 60


@pytest.mark.parametrize(
    "name, value",
    [
        ("EVENT_CHANNEL_ID", "events"),
        ("BOT_MISFIRE_GRACE_SECONDS", "0"),
        ("BOT_STORAGE_BACKEND", "mongo"),
    ],
)
def test_load_config_rejects_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigError):
        load_config()
