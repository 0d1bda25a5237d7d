from __future__ import annotations

from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware

from ...services.lifecycle import EventLifecycle
from ...services.telegram import TelegramSender


class ContextMiddleware(BaseMiddleware):
    """Passes the lifecycle controller and the sender to handlers.

    Values already present in the handler data (set by an earlier middleware or
    a filter) take precedence.
    """

    def __init__(self, *, lifecycle: EventLifecycle, telegram_sender: TelegramSender) -> None:
        self._services = MappingProxyType({"lifecycle": lifecycle, "telegram_sender": telegram_sender})

    async def __call__(
        self,
        handler: Callable[[Any, Dict[str, Any]], Awaitable[Any]],
        event: Any,
        data: Dict[str, Any],
    ) -> Any:
        for name, service in self._services.items():
            data.setdefault(name, service)
        return await handler(event, data)
