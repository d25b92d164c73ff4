"""Shared UTC timestamp and date-key helpers."""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return current UTC time with second precision."""
    return datetime.now(UTC).replace(microsecond=0)


def to_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC; naive values are taken as UTC."""
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def iso_z(value: datetime) -> str:
    """Format a datetime as ISO-8601 with trailing Z in UTC."""
    return to_utc(value).isoformat().replace("+00:00", "Z")


def parse_iso_z(value: str) -> datetime | None:
    """Parse an ISO timestamp and normalize to UTC."""
    raw = value.strip()
    if not raw:
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    return to_utc(parsed)


def date_key(value: datetime) -> str:
    """Return the UTC calendar date (YYYY-MM-DD) of an absolute timestamp.

    Both game bucketing and the fetch gate's notion of "today" go through
    this one conversion, so a late tip-off and the process clock always agree
    on which day a game belongs to.
    """
    return to_utc(value).date().isoformat()


def today_key(now: datetime | None = None) -> str:
    """Return the date key for ``now`` (defaults to the current time)."""
    return date_key(now if now is not None else utc_now())
