from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from daily_parlay.time_utils import date_key, iso_z, parse_iso_z, today_key, utc_now


def test_utc_now_is_utc_without_microseconds() -> None:
    now = utc_now()

    assert now.tzinfo == UTC
    assert now.microsecond == 0


def test_iso_z_normalizes_non_utc_datetime() -> None:
    eastern = datetime(2026, 2, 13, 5, 0, 0, tzinfo=timezone(timedelta(hours=-5)))

    assert iso_z(eastern) == "2026-02-13T10:00:00Z"


def test_parse_iso_z_handles_millis_and_blank() -> None:
    assert parse_iso_z("2026-02-13T23:30:00.000Z") == datetime(2026, 2, 13, 23, 30, tzinfo=UTC)
    assert parse_iso_z("") is None
    assert parse_iso_z("not-a-date") is None


def test_date_key_uses_utc_calendar_date() -> None:
    # 8pm Eastern on the 13th is already the 14th in UTC.
    eastern = datetime(2026, 2, 13, 20, 0, 0, tzinfo=timezone(timedelta(hours=-5)))

    assert date_key(eastern) == "2026-02-14"
    assert today_key(eastern) == "2026-02-14"
