# miary/utils/timezones.py
from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, NamedTuple, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from miary.config import get_settings

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


class ClockTime(NamedTuple):
    hour: int
    minute: int
    second: int = 0


NOON = ClockTime(12, 0, 0)


def resolve_zone(tz_name: str | None = None) -> ZoneInfo:
    """
    Map an IANA name to a ZoneInfo. Unknown names fall back to the configured
    default timezone (logged, never raised).
    """
    default_name = get_settings().DEFAULT_TIMEZONE
    name = tz_name or default_name
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, falling back to %s", name, default_name)
        return ZoneInfo(default_name)


def parse_selected_time(value: str | None) -> Optional[ClockTime]:
    """
    Parse "H:MM", "HH:MM" or "HH:MM:SS". "24:00" clamps to 23:59; anything
    else that does not form a valid wall-clock time returns None.
    """
    if not value or not isinstance(value, str):
        return None
    m = _TIME_RE.match(value.strip())
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    second = int(m.group(3)) if m.group(3) else 0
    if hour == 24 and minute == 0 and second == 0:
        return ClockTime(23, 59, 0)
    if hour > 23 or minute > 59 or second > 59:
        return None
    return ClockTime(hour, minute, second)


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp (or pass a datetime through). Naive values are
    read as UTC, matching how the database hands out timestamptz columns.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_epoch_ms(value) -> Optional[float]:
    dt = parse_timestamp(value)
    if dt is None:
        return None
    return dt.timestamp() * 1000


def to_local_date_iso(value, zone: ZoneInfo) -> Optional[str]:
    """Calendar date (YYYY-MM-DD) of an instant as seen in ``zone``."""
    dt = parse_timestamp(value)
    if dt is None:
        return None
    return dt.astimezone(zone).date().isoformat()


def parse_date_iso(value: str | None) -> Optional[date]:
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def local_time_to_epoch_ms(date_iso: str, clock: ClockTime, zone: ZoneInfo) -> Optional[float]:
    """Epoch milliseconds of a local wall-clock time on ``date_iso`` in ``zone``."""
    day = parse_date_iso(date_iso)
    if day is None:
        return None
    local = datetime.combine(day, time(clock.hour, clock.minute, clock.second), tzinfo=zone)
    return local.timestamp() * 1000


def inclusive_day_count(start_iso: str, end_iso: str) -> Optional[int]:
    start, end = parse_date_iso(start_iso), parse_date_iso(end_iso)
    if start is None or end is None:
        return None
    return abs((end - start).days) + 1


def iter_date_isos(start_iso: str, end_iso: str) -> Iterator[str]:
    """Every calendar date from start to end inclusive, as YYYY-MM-DD."""
    start, end = parse_date_iso(start_iso), parse_date_iso(end_iso)
    if start is None or end is None:
        return
    if start > end:
        start, end = end, start
    current = start
    while current <= end:
        yield current.isoformat()
        current += timedelta(days=1)


def utc_now_iso() -> str:
    """UTC wall clock with millisecond precision and a trailing Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


__all__ = [
    "ClockTime",
    "NOON",
    "resolve_zone",
    "parse_selected_time",
    "parse_timestamp",
    "to_epoch_ms",
    "to_local_date_iso",
    "parse_date_iso",
    "local_time_to_epoch_ms",
    "inclusive_day_count",
    "iter_date_isos",
    "utc_now_iso",
]
