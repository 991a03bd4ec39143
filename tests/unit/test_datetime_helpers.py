"""Unit tests for calendar date utilities (progression_engine/utils/datetime_helpers.py)"""
import pytest
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from progression_engine.utils.datetime_helpers import (
    date_range,
    day_of_year,
    days_between,
    get_timezone,
    now_in_timezone,
    to_date,
    today_in_timezone,
)


class TestTimezones:
    """Test timezone resolution"""

    def test_get_timezone_valid(self):
        """Test a valid IANA name resolves"""
        assert get_timezone("Asia/Riyadh") == ZoneInfo("Asia/Riyadh")

    def test_get_timezone_invalid_falls_back_to_utc(self):
        """Test an unknown zone falls back to UTC"""
        assert get_timezone("Not/AZone") == ZoneInfo("UTC")

    def test_get_timezone_default(self, monkeypatch):
        """Test None uses the configured default"""
        from progression_engine import config
        monkeypatch.setattr(config, "DEFAULT_TIMEZONE", "Europe/London")

        assert get_timezone() == ZoneInfo("Europe/London")

    def test_now_is_aware(self):
        """Test the current time carries its zone"""
        assert now_in_timezone("UTC").tzinfo is not None

    def test_today_is_a_date(self):
        """Test today is a plain date"""
        today = today_in_timezone("UTC")
        assert isinstance(today, date)
        assert not isinstance(today, datetime)


class TestDateMath:
    """Test calendar arithmetic"""

    @pytest.mark.parametrize("value,expected", [
        (date(2024, 3, 15), date(2024, 3, 15)),
        (datetime(2024, 3, 15, 23, 59, tzinfo=timezone.utc), date(2024, 3, 15)),
        ("2024-03-15", date(2024, 3, 15)),
    ])
    def test_to_date(self, value, expected):
        """Test date-like values normalize to a date"""
        assert to_date(value) == expected

    def test_to_date_invalid_string(self):
        """Test a non-ISO string is rejected"""
        with pytest.raises(ValueError):
            to_date("15/03/2024")

    def test_day_of_year(self):
        """Test day of year is 1-based and leap-aware"""
        assert day_of_year(date(2024, 1, 1)) == 1
        assert day_of_year(date(2024, 3, 1)) == 61
        assert day_of_year(date(2023, 3, 1)) == 60
        assert day_of_year(date(2024, 12, 31)) == 366

    def test_days_between(self):
        """Test signed day differences across a year boundary"""
        assert days_between(date(2023, 12, 31), date(2024, 1, 2)) == 2
        assert days_between(date(2024, 1, 2), date(2023, 12, 31)) == -2

    def test_date_range(self):
        """Test ranges end at the given date, oldest first"""
        assert list(date_range(date(2024, 3, 2), 3)) == [
            date(2024, 2, 29), date(2024, 3, 1), date(2024, 3, 2)
        ]

    def test_date_range_empty(self):
        """Test a non-positive length yields nothing"""
        assert list(date_range(date(2024, 3, 2), 0)) == []
        assert list(date_range(date(2024, 3, 2), -4)) == []
