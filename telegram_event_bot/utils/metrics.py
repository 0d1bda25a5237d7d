from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass, fields
from typing import Callable, Deque

SUMMARY_WINDOW = 300


@dataclass
class Metrics:
    sends: int = 0
    retries: int = 0
    timeouts: int = 0
    delivery_failures: int = 0
    reminders_scheduled: int = 0
    reminders_cancelled: int = 0
    reminders_fired: int = 0
    reminders_skipped: int = 0


@dataclass(frozen=True)
class WindowStats:
    calls: int
    retries: int
    latency_p50: float
    latency_p95: float


def _quantile(ordered: list[float], q: float) -> float:
    if not ordered:
        return 0.0
    return ordered[min(len(ordered) - 1, int(len(ordered) * q))]


class MetricsCollector:
    """Lifetime counters plus Bot API latency and retries over the last few minutes.

    The window is the interval of the summary job.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        window_seconds: float = SUMMARY_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._metrics = Metrics()
        self._lock = asyncio.Lock()
        self._logger = logger or logging.getLogger("telegram_event_bot.metrics")
        self._window = window_seconds
        self._clock = clock
        self._calls: Deque[tuple[float, float]] = deque()
        self._retry_times: Deque[float] = deque()

    async def incr(self, **kwargs: int) -> None:
        async with self._lock:
            for key, value in kwargs.items():
                if hasattr(self._metrics, key):
                    setattr(self._metrics, key, getattr(self._metrics, key) + value)

    async def record_latency(self, latency: float) -> None:
        async with self._lock:
            self._calls.append((self._clock(), latency))

    async def record_retry(self) -> None:
        async with self._lock:
            self._retry_times.append(self._clock())
            self._metrics.retries += 1

    async def record_timeout(self) -> None:
        async with self._lock:
            self._metrics.timeouts += 1

    async def snapshot(self) -> Metrics:
        async with self._lock:
            return Metrics(**{field.name: getattr(self._metrics, field.name) for field in fields(Metrics)})

    async def window(self) -> WindowStats:
        async with self._lock:
            cutoff = self._clock() - self._window
            while self._calls and self._calls[0][0] < cutoff:
                self._calls.popleft()
            while self._retry_times and self._retry_times[0] < cutoff:
                self._retry_times.popleft()
            latencies = sorted(latency for _, latency in self._calls)
            retries = len(self._retry_times)
        return WindowStats(
            calls=len(latencies),
            retries=retries,
            latency_p50=_quantile(latencies, 0.5),
            latency_p95=_quantile(latencies, 0.95),
        )

    async def log_summary(self) -> None:
        totals = await self.snapshot()
        recent = await self.window()
        self._logger.info(
            "metrics: calls=%d retries=%d/%d p50=%.3f p95=%.3f | sends=%d timeouts=%d failures=%d "
            "reminders scheduled=%d cancelled=%d fired=%d skipped=%d",
            recent.calls,
            recent.retries,
            totals.retries,
            recent.latency_p50,
            recent.latency_p95,
            totals.sends,
            totals.timeouts,
            totals.delivery_failures,
            totals.reminders_scheduled,
            totals.reminders_cancelled,
            totals.reminders_fired,
            totals.reminders_skipped,
        )
