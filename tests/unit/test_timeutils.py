"""Tests for weekday, HH:MM and day window helpers."""
from datetime import date, datetime, timedelta, timezone

import pytest

from clinic_schedule.errors import ScheduleValidationError
from clinic_schedule.timeutils import (
    day_label,
    day_window,
    is_valid_shift,
    js_weekday,
    parse_date,
    parse_hhmm,
    to_local,
    validate_day,
)

ICT = timezone(timedelta(hours=7))


class TestDayLabels:
    """Test weekday label table (Sunday = 0)."""

    def test_sunday_is_zero(self):
        assert day_label(0) == "Chủ nhật"
        assert day_label(1) == "Thứ hai"
        assert day_label(6) == "Thứ bảy"

    @pytest.mark.parametrize("day", [-1, 7, True, "1"])
    def test_out_of_range_rejected(self, day):
        with pytest.raises(ScheduleValidationError):
            validate_day(day)

    def test_js_weekday(self):
        """Python Monday = 0 maps to 1; Sunday maps to 0."""
        assert js_weekday(date(2025, 1, 13)) == 1  # Monday
        assert js_weekday(date(2025, 1, 19)) == 0  # Sunday
        assert js_weekday(date(2025, 1, 18)) == 6  # Saturday


class TestShiftTimes:
    """Test HH:MM validation and ordering."""

    @pytest.mark.parametrize("value", ["00:00", "08:30", "23:59"])
    def test_valid_times(self, value):
        assert parse_hhmm(value) == value

    @pytest.mark.parametrize("value", ["8:00", "24:00", "12:60", "0800", "", None])
    def test_invalid_times(self, value):
        with pytest.raises(ScheduleValidationError):
            parse_hhmm(value)

    def test_shift_order(self):
        assert is_valid_shift("08:00", "12:00") is True
        assert is_valid_shift("13:00", "12:00") is False
        assert is_valid_shift("08:00", "08:00") is False
        assert is_valid_shift("8:00", "12:00") is False


class TestDayWindow:
    """Test local day window and timestamp normalisation."""

    def test_window_bounds(self):
        start, end = day_window("2025-01-15", ICT)
        assert start == datetime(2025, 1, 15, 0, 0, 0, tzinfo=ICT)
        assert end == datetime(2025, 1, 15, 23, 59, 59, tzinfo=ICT)

    def test_utc_timestamp_converted_to_local(self):
        """02:30Z is 09:30 in UTC+7."""
        local = to_local("2025-01-15T02:30:00.000Z", ICT)
        assert local.hour == 9
        assert local.minute == 30
        assert local.utcoffset() == timedelta(hours=7)

    def test_naive_timestamp_is_local_wall_time(self):
        local = to_local("2025-01-15T09:30:00", ICT)
        assert local == datetime(2025, 1, 15, 9, 30, tzinfo=ICT)

    def test_late_utc_timestamp_falls_on_next_local_day(self):
        start, end = day_window(date(2025, 1, 16), ICT)
        moment = to_local("2025-01-15T18:00:00Z", ICT)
        assert start <= moment <= end

    def test_parse_date(self):
        assert parse_date("2025-01-15") == date(2025, 1, 15)
        assert parse_date(datetime(2025, 1, 15, 10, 0)) == date(2025, 1, 15)
        with pytest.raises(ScheduleValidationError):
            parse_date("15/01/2025")
