from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Any, Awaitable, Callable, Dict, Literal, Optional

from aiogram.exceptions import (
    TelegramAPIError,
    TelegramBadRequest,
    TelegramNetworkError,
    TelegramRetryAfter,
    TelegramServerError,
)

from ..config import NetworkConfig
from ..errors import DeliveryFailure
from ..logging_config import audit
from ..utils.metrics import MetricsCollector

logger = logging.getLogger("telegram_event_bot.services.telegram")


Profile = Literal["ui", "heavy"]

DEDUP_WINDOW = 60.0


class TelegramSender:
    """Runs Bot API calls with per-profile timeouts and retries.

    ``ui`` calls answer a live interaction: few retries, short jittered waits.
    ``heavy`` calls are background deliveries: more retries, exponential
    backoff. A call whose ``op_id`` completed within the last minute is not
    repeated. The last error is re-raised to the caller.
    """

    def __init__(
        self,
        *,
        bot,
        network: NetworkConfig,
        metrics: MetricsCollector,
    ) -> None:
        self._bot = bot
        self._network = network
        self._metrics = metrics
        self._recent_ops: Dict[str, float] = {}
        self._lock = asyncio.Lock()

    async def safe_tg_call(
        self,
        profile: Profile,
        op_id: str,
        func: Callable[..., Awaitable[Any]],
        /,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        now = time.monotonic()
        async with self._lock:
            stale_before = now - DEDUP_WINDOW
            for key, ts in list(self._recent_ops.items()):
                if ts < stale_before:
                    self._recent_ops.pop(key, None)
            if op_id in self._recent_ops:
                audit("CALL_DEDUP", op_id=op_id)
                return None

        started = time.monotonic()
        result = await self._execute_with_retry(profile, op_id, func, args, kwargs)
        async with self._lock:
            self._recent_ops[op_id] = time.monotonic()
        await self._metrics.record_latency(time.monotonic() - started)
        return result

    async def _execute_with_retry(
        self,
        profile: Profile,
        op_id: str,
        func: Callable[..., Awaitable[Any]],
        args: tuple[Any, ...],
        kwargs: Dict[str, Any],
    ) -> Any:
        if profile == "ui":
            retries = self._network.ui_retries
            timeout = self._network.ui_read_timeout
        else:
            retries = self._network.heavy_max_retries
            timeout = self._network.request_timeout

        last_exc: Optional[Exception] = None
        for attempt in range(retries + 1):
            try:
                result = await asyncio.wait_for(func(*args, **kwargs), timeout=timeout)
                await self._metrics.incr(sends=1)
                return result
            except TelegramRetryAfter as exc:
                last_exc = exc
                wait_for = float(exc.retry_after)
                audit("NETWORK_RETRY", op_id=op_id, delay=round(wait_for, 3))
                await self._metrics.record_retry()
                await asyncio.sleep(wait_for)
            except TelegramBadRequest as exc:
                if "message is not modified" in str(exc).lower():
                    logger.info("message not modified op_id=%s", op_id)
                    return None
                last_exc = exc
                break
            except (TelegramNetworkError, TelegramServerError, asyncio.TimeoutError) as exc:
                last_exc = exc
                if isinstance(exc, asyncio.TimeoutError):
                    await self._metrics.record_timeout()
                if attempt >= retries:
                    break
                delay = self._compute_delay(profile, attempt)
                audit("NETWORK_RETRY", op_id=op_id, delay=round(delay, 3))
                await self._metrics.record_retry()
                await asyncio.sleep(delay)
            except Exception as exc:
                last_exc = exc
                break
        logger.warning("telegram call failed op_id=%s error=%s", op_id, last_exc)
        raise last_exc  # type: ignore[misc]

    async def send_direct(self, user_id: int, text: str, *, op_id: str) -> Any:
        """Send a private message to ``user_id`` with the heavy profile.

        Raises :class:`DeliveryFailure` once retries are exhausted or Telegram
        refuses the message (for example when the user never started the bot).
        """

        try:
            return await self.safe_tg_call(
                "heavy", op_id, self._bot.send_message, chat_id=user_id, text=text
            )
        except (TelegramAPIError, asyncio.TimeoutError) as exc:
            raise DeliveryFailure(f"Could not deliver the message to {user_id}.") from exc

    def _compute_delay(self, profile: Profile, attempt: int) -> float:
        if profile == "ui":
            return random.uniform(self._network.ui_jitter_min, self._network.ui_jitter_max)
        delay = self._network.heavy_backoff_start * (2 ** attempt)
        return min(delay, self._network.heavy_backoff_cap)

    @property
    def bot(self):
        return self._bot
