"""Mini README: Shared fixtures for the expense tracker tests.

Provides a fixed clock so date defaults are deterministic, plus started
ledger engines over the in-memory and SQLite stores.
"""

from __future__ import annotations

from datetime import date

import pytest
import pytest_asyncio

from expense_tracker.ledger import InMemoryExpenseStore, LedgerEngine, SQLiteExpenseStore

# A Wednesday; the Sunday-based week runs 2024-05-12 .. 2024-05-18.
FIXED_TODAY = date(2024, 5, 15)


@pytest.fixture
def today() -> date:
    return FIXED_TODAY


@pytest_asyncio.fixture
async def engine() -> LedgerEngine:
    ledger = LedgerEngine(InMemoryExpenseStore(), today=lambda: FIXED_TODAY)
    await ledger.start()
    yield ledger
    await ledger.close()


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path) -> LedgerEngine:
    ledger = LedgerEngine(SQLiteExpenseStore(str(tmp_path / "ledger.db")), today=lambda: FIXED_TODAY)
    await ledger.start()
    yield ledger
    await ledger.close()


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def any_engine(request, tmp_path) -> LedgerEngine:
    """Started engine over each store, so REAL column rounding is exercised too."""

    if request.param == "sqlite":
        store = SQLiteExpenseStore(str(tmp_path / "ledger.db"))
    else:
        store = InMemoryExpenseStore()
    ledger = LedgerEngine(store, today=lambda: FIXED_TODAY)
    await ledger.start()
    yield ledger
    await ledger.close()
