"""Mini README: Centralised configuration for the expense tracker.

Structure:
    * ExpenseTrackerSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read ``EXPENSE_TRACKER_*`` environment
    variables (or a local ``.env`` file). The configuration is cached so the
    cost of validation is incurred only once per process; tests call
    ``get_settings.cache_clear()`` after patching the environment.
"""

from __future__ import annotations

import calendar
from functools import lru_cache
from pathlib import Path
from typing import Union

from pydantic import Field, validator
from pydantic_settings import BaseSettings

IN_MEMORY_DATABASE = ":memory:"


class ExpenseTrackerSettings(BaseSettings):
    """Runtime configuration for the ledger engine and its shells."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    database_path: Path = Field(
        Path("data") / "expenses.db",
        description="SQLite file holding the expense ledger. Use ':memory:' for a throwaway ledger.",
    )
    interface_host: str = Field(
        "127.0.0.1",
        description="Network interface for the dashboard to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Port the dashboard exposes.",
        ge=1,
        le=65535,
    )
    first_weekday: int = Field(
        calendar.SUNDAY,
        description="Day the 'This Week' window starts on (0 = Monday ... 6 = Sunday).",
        ge=0,
        le=6,
    )
    log_level: str = Field(
        "INFO",
        description="Root logging level applied by the CLI and the dashboard.",
    )

    class Config:
        env_prefix = "EXPENSE_TRACKER_"
        env_file = ".env"
        case_sensitive = False

    @validator("database_path", pre=True)
    def _expand_path(cls, value: Union[str, Path]) -> Path:
        """Expand user directories and make sure the parent directory exists."""

        if str(value) == IN_MEMORY_DATABASE:
            return Path(IN_MEMORY_DATABASE)
        path = Path(value).expanduser().resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def database_target(self) -> str:
        """Return the connection target understood by ``sqlite3.connect``."""

        return str(self.database_path)


@lru_cache()
def get_settings() -> ExpenseTrackerSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return ExpenseTrackerSettings()
