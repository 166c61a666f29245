"""Configuration package."""

from expense_ledger.config.settings import (
    DEFAULT_FIRST_DAY_OF_WEEK,
    AppSettings,
    CalendarSettings,
    Settings,
    StorageSettings,
    get_settings,
    system_timezone,
)

__all__ = [
    "DEFAULT_FIRST_DAY_OF_WEEK",
    "AppSettings",
    "CalendarSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "system_timezone",
]
