from datetime import datetime, timedelta, timezone

from telegram_event_bot.utils import datetime as dt_utils


def test_parse_instant_accepts_zulu_and_offsets():
    assert dt_utils.parse_instant("2025-06-01T10:00:00.000Z") == datetime(2025, 6, 1, 10, tzinfo=timezone.utc)
    shifted = dt_utils.parse_instant("2025-06-01T12:00:00+02:00")
    assert shifted == datetime(2025, 6, 1, 10, tzinfo=timezone.utc)
    assert shifted.tzinfo == timezone.utc


def test_ensure_utc_treats_naive_as_utc():
    naive = datetime(2025, 6, 1, 10)
    assert dt_utils.ensure_utc(naive) == datetime(2025, 6, 1, 10, tzinfo=timezone.utc)


def test_epoch_ms_round_trip():
    value = datetime(2025, 6, 1, 10, 30, tzinfo=timezone.utc)
    assert dt_utils.to_epoch_ms(value) == 1748773800000
    assert dt_utils.from_epoch_ms(1748773800000) == value


def test_format_relative():
    now = datetime(2025, 6, 1, 10, tzinfo=timezone.utc)
    assert dt_utils.format_relative(now + timedelta(days=1, hours=2), now) == "in 1d 2h"
    assert dt_utils.format_relative(now + timedelta(minutes=45), now) == "in 45m"
    assert dt_utils.format_relative(now - timedelta(hours=3), now) == "3h ago"
    assert dt_utils.format_relative(now, now) == "now"


def test_format_utc():
    assert dt_utils.format_utc(datetime(2025, 6, 1, 9, 5, tzinfo=timezone.utc)) == "2025-06-01 09:05 UTC"
