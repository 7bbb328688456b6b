"""UTC helpers and calendar anchors for period returns.

Candle timestamps are epoch seconds. Their calendar date depends on the
timezone the monitor runs in, so every conversion takes an explicit
tzinfo. Calendar anchors work on plain dates and ignore trading
holidays; the lookback in the period-return resolver skips non-trading
days instead.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utc_now() -> datetime:
    """Return the current UTC datetime, timezone-aware."""
    return datetime.now(UTC)


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as ISO 8601 with second precision and Z suffix.

    Output format: YYYY-MM-DDTHH:MM:SSZ
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    utc_dt = dt.astimezone(UTC)
    return utc_dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def resolve_timezone(name: str) -> tzinfo:
    """Look up an IANA timezone name. "UTC" maps to datetime.UTC.

    Raises:
        ValueError: If the name is not a known timezone.
    """
    if name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name!r}") from e


def candle_date(timestamp: int, tz: tzinfo = UTC) -> date:
    """Calendar date of an epoch-seconds timestamp in the given timezone."""
    return datetime.fromtimestamp(timestamp, tz).date()


def week_start(d: date) -> date:
    """Monday of the week containing d (a Sunday belongs to the prior Monday)."""
    return d - timedelta(days=d.weekday())


def day_before_week_start(d: date) -> date:
    """The Sunday before the Monday that starts d's week."""
    return week_start(d) - timedelta(days=1)


def last_day_of_previous_month(d: date) -> date:
    """Last calendar day of the month before d's month."""
    return d.replace(day=1) - timedelta(days=1)


def last_day_of_previous_year(d: date) -> date:
    """December 31 of the year before d's year."""
    return date(d.year - 1, 12, 31)
