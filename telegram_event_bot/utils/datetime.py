from __future__ import annotations

from datetime import datetime, timedelta, timezone

UTC = timezone.utc
DISPLAY_FORMAT = "%Y-%m-%d %H:%M UTC"


def now_utc() -> datetime:
    return datetime.now(tz=UTC)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_instant(raw: str) -> datetime:
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def to_epoch_ms(value: datetime) -> int:
    return int(ensure_utc(value).timestamp() * 1000)


def from_epoch_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=UTC)


def format_utc(value: datetime) -> str:
    return ensure_utc(value).strftime(DISPLAY_FORMAT)


def format_relative(value: datetime, now: datetime | None = None) -> str:
    now = now or now_utc()
    delta = ensure_utc(value) - now
    past = delta < timedelta(0)
    seconds = int(abs(delta.total_seconds()))
    days, rest = divmod(seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60
    parts: list[str] = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes and not days:
        parts.append(f"{minutes}m")
    if not parts:
        return "now"
    span = " ".join(parts)
    return f"{span} ago" if past else f"in {span}"
