"""
Reporting window, UTC offsets and Unix-second normalization of punch times.

Both sides of the reconciliation are reduced to whole Unix seconds:
device events arrive as ISO-8601 strings, attendance records as naive
local times plus the IANA zone of the device that captured them.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import log
from .exceptions import ConfigError


@dataclass(frozen=True)
class ReportWindow:
    start: date
    end: date
    tz_offset: str          # "+07:00"

    @property
    def start_str(self) -> str:
        return self.start.isoformat()

    @property
    def end_str(self) -> str:
        return self.end.isoformat()


def format_tz_offset(offset: timedelta) -> str:
    """timedelta(hours=7) → "+07:00", timedelta(hours=-4, minutes=-30) → "-04:30"."""
    total_minutes = int(offset.total_seconds() // 60)
    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def local_tz_offset(now=None) -> str:
    """The system's current UTC offset as "±HH:MM"."""
    now = now or datetime.now().astimezone()
    return format_tz_offset(now.utcoffset() or timedelta(0))


def offset_to_tzinfo(tz_offset: str) -> timezone:
    """"+07:00" → timezone(timedelta(hours=7))."""
    sign = -1 if tz_offset.startswith("-") else 1
    hours, minutes = tz_offset.lstrip("+-").split(":")
    return timezone(sign * timedelta(hours=int(hours), minutes=int(minutes)))


def _parse_day(value, flag):
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ConfigError(f"{flag} must be YYYY-MM-DD, got {value!r}")


def resolve_window(period_start=None, period_end=None, last_days=3, now=None) -> ReportWindow:
    """
    Work out which days to reconcile.

    No period: the last `last_days` days up to today. Start only: that
    single day. End without start, or start after end, is rejected.
    """
    now = now or datetime.now().astimezone()
    tz_offset = local_tz_offset(now)

    if period_end and not period_start:
        raise ConfigError("--period-end requires --period-start")

    if period_start:
        start = _parse_day(period_start, "--period-start")
        end = _parse_day(period_end, "--period-end") if period_end else start
    else:
        start = (now - timedelta(days=last_days)).date()
        end = now.date()

    if start > end:
        raise ConfigError(f"Period start {start} is after period end {end}")

    return ReportWindow(start=start, end=end, tz_offset=tz_offset)


# ─── Timestamp normalization ─────────────────────────────────────

def parse_event_timestamp(value: str, default_tz=None) -> int:
    """
    Device event time → Unix seconds, truncated.

    Accepts "Z" or numeric offsets in any letter case and fractional
    seconds. Naive times are read in default_tz (system local if None).
    """
    text = value.strip().upper()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=default_tz) if default_tz else moment.astimezone()
    return math.floor(moment.timestamp())


def local_timestamp(value: str, tz) -> int:
    """Naive "YYYY-MM-DD HH:MM:SS" in zone tz → Unix seconds, truncated."""
    moment = datetime.fromisoformat(value.strip()).replace(tzinfo=tz)
    return math.floor(moment.timestamp())


class TimezoneResolver:
    """Resolves IANA zone names once per name; unknown names use the fallback."""

    def __init__(self, fallback):
        self._fallback = fallback
        self._cache = {}

    def resolve(self, name):
        if name not in self._cache:
            try:
                zone = ZoneInfo(name) if name else self._fallback
            except (ZoneInfoNotFoundError, ValueError, TypeError):
                log.warning("Unknown device timezone %r — using local offset", name)
                zone = self._fallback
            self._cache[name] = zone
        return self._cache[name]
