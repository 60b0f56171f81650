from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from reconcile_core.dates import (
    TimezoneResolver, format_tz_offset, local_timestamp, offset_to_tzinfo,
    parse_event_timestamp, resolve_window,
)
from reconcile_core.exceptions import ConfigError

NOW = datetime(2024, 5, 10, 9, 30, tzinfo=timezone(timedelta(hours=7)))


def test_format_tz_offset():
    assert format_tz_offset(timedelta(hours=7)) == "+07:00"
    assert format_tz_offset(timedelta(0)) == "+00:00"
    assert format_tz_offset(timedelta(hours=-4, minutes=-30)) == "-04:30"
    assert format_tz_offset(timedelta(hours=5, minutes=45)) == "+05:45"


def test_offset_to_tzinfo_roundtrips_sign():
    assert offset_to_tzinfo("+07:00").utcoffset(None) == timedelta(hours=7)
    assert offset_to_tzinfo("-04:30").utcoffset(None) == -timedelta(hours=4, minutes=30)


def test_default_window_covers_last_days():
    window = resolve_window(last_days=3, now=NOW)
    assert (window.start, window.end) == (date(2024, 5, 7), date(2024, 5, 10))
    assert window.tz_offset == "+07:00"
    assert (window.start_str, window.end_str) == ("2024-05-07", "2024-05-10")


def test_start_only_is_a_single_day():
    window = resolve_window("2024-05-01", None, now=NOW)
    assert window.start == window.end == date(2024, 5, 1)


def test_explicit_period():
    window = resolve_window("2024-05-01", "2024-05-03", now=NOW)
    assert (window.start, window.end) == (date(2024, 5, 1), date(2024, 5, 3))


@pytest.mark.parametrize("start, end", [
    ("", "2024-05-03"),
    ("2024-05-04", "2024-05-03"),
    ("05/01/2024", None),
])
def test_invalid_periods_are_rejected(start, end):
    with pytest.raises(ConfigError):
        resolve_window(start, end, now=NOW)


@pytest.mark.parametrize("raw", [
    "2023-11-14T22:13:20Z",
    "2023-11-14t22:13:20z",
    "2023-11-14T22:13:20.750Z",
    "2023-11-15T05:13:20+07:00",
    " 2023-11-14T22:13:20+00:00 ",
])
def test_event_times_normalize_to_the_same_second(raw):
    assert parse_event_timestamp(raw) == 1700000000


def test_naive_event_time_uses_default_zone():
    assert parse_event_timestamp("2023-11-15T05:13:20", offset_to_tzinfo("+07:00")) == 1700000000


def test_unreadable_event_time_raises():
    with pytest.raises(ValueError):
        parse_event_timestamp("yesterday")


def test_local_timestamp_in_named_zone():
    assert local_timestamp("2023-11-15 05:13:20", ZoneInfo("Asia/Jakarta")) == 1700000000


def test_timezone_resolver_caches_and_falls_back():
    fallback = offset_to_tzinfo("+07:00")
    resolver = TimezoneResolver(fallback)

    jakarta = resolver.resolve("Asia/Jakarta")
    assert resolver.resolve("Asia/Jakarta") is jakarta
    assert resolver.resolve("Mars/Olympus_Mons") is fallback
    assert resolver.resolve(None) is fallback
