"""Mini README: Tests for environment driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from expense_tracker.configuration import ExpenseTrackerSettings, get_settings


def test_settings_read_prefixed_environment(monkeypatch, tmp_path) -> None:
    """EXPENSE_TRACKER_* variables override the defaults."""

    target = tmp_path / "nested" / "ledger.db"
    monkeypatch.setenv("EXPENSE_TRACKER_DATABASE_PATH", str(target))
    monkeypatch.setenv("EXPENSE_TRACKER_FIRST_WEEKDAY", "0")
    get_settings.cache_clear()
    try:
        settings = get_settings()
    finally:
        get_settings.cache_clear()

    assert settings.database_path == target.resolve()
    assert target.parent.is_dir()
    assert settings.first_weekday == 0


def test_in_memory_database_is_kept_verbatim() -> None:
    settings = ExpenseTrackerSettings(database_path=":memory:")
    assert settings.database_path == Path(":memory:")
    assert settings.database_target == ":memory:"


def test_first_weekday_must_be_a_weekday_index() -> None:
    with pytest.raises(ValidationError):
        ExpenseTrackerSettings(database_path=":memory:", first_weekday=7)
