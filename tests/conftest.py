"""Shared fixtures for the ledger tests."""

import pytest

from expense_ledger.config import AppSettings, CalendarSettings, Settings, StorageSettings


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pinned to a temp directory, UTC and Monday week starts."""
    return Settings(
        storage=StorageSettings(data_dir=tmp_path / "ledger"),
        calendar=CalendarSettings(first_day_of_week=0, timezone="UTC"),
        app=AppSettings(persistence_retry_attempts=3, persistence_retry_backoff_seconds=0),
    )
