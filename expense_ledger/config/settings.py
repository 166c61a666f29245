"""
Configuration Management for Expense Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every setting can be overridden with a LEDGER_* environment variable
or a .env file, and is validated once when first read.
"""

import calendar
import os
from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".expense_ledger",
        description="Directory holding the persisted ledger records"
    )
    key_namespace: str = Field(
        default="expense_manager_",
        min_length=1,
        description="Prefix for every key the ledger writes"
    )

    @field_validator('key_namespace')
    @classmethod
    def validate_key_namespace(cls, v: str) -> str:
        """Keys become file names, so path separators are not allowed."""
        if "/" in v or "\\" in v:
            raise ValueError(f"Key namespace cannot contain path separators: {v!r}")
        return v

    @property
    def transactions_key(self) -> str:
        return f"{self.key_namespace}transactions"

    @property
    def categories_key(self) -> str:
        return f"{self.key_namespace}categories"


# Weeks run Sunday to Saturday unless configured otherwise.
DEFAULT_FIRST_DAY_OF_WEEK = calendar.SUNDAY

_LOCALTIME = Path("/etc/localtime")


def system_timezone() -> tzinfo:
    """
    The machine's zone with its full DST rules.

    Looks at $TZ, then /etc/localtime. Only when neither names a zone
    does it fall back to the current fixed UTC offset.
    """
    name = os.environ.get("TZ", "").lstrip(":")
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            pass
    if _LOCALTIME.exists():
        try:
            with _LOCALTIME.open("rb") as handle:
                return ZoneInfo.from_file(handle, key="localtime")
        except (OSError, ValueError):
            pass
    return datetime.now().astimezone().tzinfo


class CalendarSettings(BaseSettings):
    """Week and day boundary configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_CALENDAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    first_day_of_week: int = Field(
        default=DEFAULT_FIRST_DAY_OF_WEEK,
        ge=0,
        le=6,
        description="First day of the week (0=Monday .. 6=Sunday)"
    )
    timezone: Optional[str] = Field(
        default=None,
        description="IANA time zone used for day and week boundaries. "
                    "Defaults to the system zone"
    )

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v.upper() == "UTC":
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown time zone: {v}")
        return v

    @property
    def week_start_day(self) -> int:
        return self.first_day_of_week

    @property
    def tz(self) -> tzinfo:
        """Resolved time zone for calendar boundaries."""
        if self.timezone is None:
            return system_timezone()
        if self.timezone.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(self.timezone)


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for the structured log"
    )

    # Validation thresholds (warnings only)
    max_transaction_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Amounts above this are flagged for a second look"
    )
    future_date_tolerance_days: int = Field(
        default=1,
        ge=0,
        description="How many days in the future a transaction can be dated without a warning"
    )

    # Caller-side retry of failed writes
    persistence_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times the ledger flows try a failed write"
    )
    persistence_retry_backoff_seconds: float = Field(
        default=0.5,
        ge=0.0,
        le=5.0,
        description="Multiplier for the exponential wait between write attempts"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def effective_log_level(self) -> str:
        """debug_mode forces DEBUG whatever log_level says."""
        return "DEBUG" if self.debug_mode else self.log_level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access. Each part reads its own
    LEDGER_* variables; pass explicit instances to override them, e.g.
    Settings(storage=StorageSettings(data_dir=tmp_path)).
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_SETTINGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)
    calendar: CalendarSettings = Field(default_factory=CalendarSettings)
    app: AppSettings = Field(default_factory=AppSettings)


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()

