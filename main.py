"""Entry point for the Telegram event bot."""
from __future__ import annotations

import contextlib

from telegram_event_bot.core.main import run


if __name__ == "__main__":
    with contextlib.suppress(KeyboardInterrupt):
        run()
