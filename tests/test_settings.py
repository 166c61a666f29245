"""Tests for configuration defaults and resolution."""

from datetime import timezone

import pytest

from expense_ledger.config import AppSettings, CalendarSettings, system_timezone
from expense_ledger.queries import week_window

from ledger_helpers import utc, zone_or_skip


@pytest.fixture
def clean_calendar_env(monkeypatch):
    monkeypatch.delenv("LEDGER_CALENDAR_FIRST_DAY_OF_WEEK", raising=False)
    monkeypatch.delenv("LEDGER_CALENDAR_TIMEZONE", raising=False)
    return monkeypatch


class TestCalendarSettings:
    """Tests for week and zone defaults."""

    def test_week_starts_on_sunday_by_default(self, clean_calendar_env):
        assert CalendarSettings().week_start_day == 6

    def test_default_week_runs_sunday_to_saturday(self, clean_calendar_env):
        settings = CalendarSettings(timezone="UTC")
        # 2024-06-05 is a Wednesday
        window = week_window(utc(2024, 6, 5, 12, 0), settings.week_start_day, settings.tz)
        assert window.start == utc(2024, 6, 2)
        assert window.start.strftime("%a") == "Sun"

    def test_first_day_from_environment(self, clean_calendar_env):
        clean_calendar_env.setenv("LEDGER_CALENDAR_FIRST_DAY_OF_WEEK", "0")
        assert CalendarSettings().week_start_day == 0

    def test_explicit_utc(self):
        assert CalendarSettings(timezone="UTC").tz is timezone.utc

    def test_unknown_zone_rejected(self):
        with pytest.raises(ValueError, match="Unknown time zone"):
            CalendarSettings(timezone="Mars/Olympus_Mons")

    def test_default_zone_follows_tz_variable(self, clean_calendar_env):
        berlin = zone_or_skip("Europe/Berlin")
        clean_calendar_env.setenv("TZ", "Europe/Berlin")
        assert system_timezone() == berlin
        assert CalendarSettings().tz == berlin

    def test_default_zone_keeps_dst_rules(self, clean_calendar_env):
        """Winter and summer weeks both start at the real local midnight."""
        zone_or_skip("Europe/Berlin")
        clean_calendar_env.setenv("TZ", "Europe/Berlin")
        tz = CalendarSettings(first_day_of_week=0).tz

        winter = week_window(utc(2024, 12, 4, 12, 0), 0, tz)
        summer = week_window(utc(2024, 6, 5, 12, 0), 0, tz)

        assert winter.start == utc(2024, 12, 1, 23, 0)
        assert summer.start == utc(2024, 6, 2, 22, 0)


class TestAppSettings:
    """Tests for application settings."""

    def test_effective_log_level(self):
        assert AppSettings(log_level="warning").effective_log_level == "WARNING"

    def test_debug_mode_forces_debug_logging(self):
        settings = AppSettings(log_level="ERROR", debug_mode=True)
        assert settings.effective_log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            AppSettings(log_level="LOUD")
