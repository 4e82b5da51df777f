import logging
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from shiftclock.common.timezones import (
    combine_local,
    day_window,
    day_window_for_date,
    local_date,
    local_time,
    resolve_timezone,
    week_window,
)
from shiftclock.core.exceptions import ValidationError

NY = ZoneInfo("America/New_York")
ONE_MS = timedelta(milliseconds=1)


def test_day_window_spans_local_midnight_to_midnight():
    start, end = day_window(NY, datetime(2024, 6, 12, 15, 0, tzinfo=timezone.utc))

    assert start == datetime(2024, 6, 12, 4, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 6, 13, 3, 59, 59, 999000, tzinfo=timezone.utc)


def test_day_window_on_spring_forward_is_23_hours():
    start, end = day_window_for_date(NY, date(2024, 3, 10))

    assert end - start + ONE_MS == timedelta(hours=23)


def test_day_window_on_fall_back_is_25_hours():
    start, end = day_window_for_date(NY, date(2024, 11, 3))

    assert end - start + ONE_MS == timedelta(hours=25)


def test_late_evening_utc_instant_belongs_to_previous_local_date():
    instant = datetime(2024, 6, 13, 2, 30, tzinfo=timezone.utc)

    assert local_date(NY, instant) == date(2024, 6, 12)


def test_week_window_starts_on_sunday_by_default():
    start, end = week_window(NY, datetime(2024, 6, 12, 15, 0, tzinfo=timezone.utc))

    assert start == datetime(2024, 6, 9, 4, 0, tzinfo=timezone.utc)
    assert end == datetime(2024, 6, 16, 3, 59, 59, 999000, tzinfo=timezone.utc)


def test_week_window_honours_monday_start():
    start, _ = week_window(NY, datetime(2024, 6, 12, 15, 0, tzinfo=timezone.utc), week_start=0)

    assert start == datetime(2024, 6, 10, 4, 0, tzinfo=timezone.utc)


def test_combine_local_uses_offset_of_that_date():
    assert combine_local(NY, date(2024, 1, 8), time(9, 0)) == datetime(2024, 1, 8, 14, 0, tzinfo=timezone.utc)
    assert combine_local(NY, date(2024, 7, 8), time(9, 0)) == datetime(2024, 7, 8, 13, 0, tzinfo=timezone.utc)


def test_local_time_returns_wall_clock_and_weekday():
    assert local_time(NY, datetime(2024, 6, 12, 15, 5, tzinfo=timezone.utc)) == ("11:05", "wednesday")


def test_naive_instant_is_rejected():
    with pytest.raises(ValidationError):
        local_date(NY, datetime(2024, 6, 12, 15, 0))


def test_resolve_timezone_maps_admin_labels():
    assert resolve_timezone("Pacific Standard Time (PST)") == "America/Los_Angeles"
    assert resolve_timezone("Central Standard Time (CST)") == "America/Chicago"


def test_resolve_timezone_passes_iana_names_through():
    assert resolve_timezone("Europe/London") == "Europe/London"


def test_resolve_timezone_falls_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING):
        assert resolve_timezone("Mars Standard Time") == "America/New_York"

    assert "falling back" in caplog.text
