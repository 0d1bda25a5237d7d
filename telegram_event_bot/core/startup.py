from __future__ import annotations

from .application import Application
from ..config import ConfigError, load_config


async def create_application() -> Application:
    config = load_config()
    if not config.bot.token:
        raise ConfigError("BOT_TOKEN is not set")
    return Application(config=config)
