"""Mini README: Tests for the SQLite and in-memory expense stores.

Structure:
    * ordering and identifier tests run against both stores.
    * persistence, schema and error translation tests target SQLite.
"""

from __future__ import annotations

import sqlite3
from datetime import date
from decimal import Decimal

import pytest

from expense_tracker.ledger import (
    ConstraintViolation,
    InMemoryExpenseStore,
    SQLiteExpenseStore,
    StorageUnavailable,
)


@pytest.fixture(params=["sqlite", "memory"])
def store(request):
    if request.param == "sqlite":
        return SQLiteExpenseStore(":memory:")
    return InMemoryExpenseStore()


@pytest.mark.asyncio
async def test_list_all_returns_newest_first(store) -> None:
    """Rows come back ordered by identifier descending."""

    await store.initialize()
    first = await store.insert(Decimal("3"), "Food", None, date(2024, 5, 1))
    second = await store.insert(Decimal("4"), "Books", "novel", date(2024, 4, 1))

    rows = await store.list_all()
    assert [row.expense_id for row in rows] == [second, first]
    assert rows[0].note == "novel"
    assert rows[1].note is None


@pytest.mark.asyncio
async def test_initialize_is_idempotent(store) -> None:
    """Calling initialize twice keeps existing rows."""

    await store.initialize()
    await store.insert(Decimal("1"), "Food", None, date(2024, 5, 1))
    await store.initialize()
    assert len(await store.list_all()) == 1


@pytest.mark.asyncio
async def test_identifiers_are_not_reused_after_delete(store) -> None:
    """Deleting the newest row must not free its identifier."""

    await store.initialize()
    await store.insert(Decimal("1"), "Food", None, date(2024, 5, 1))
    newest = await store.insert(Decimal("2"), "Food", None, date(2024, 5, 1))
    assert await store.delete(newest) is True

    replacement = await store.insert(Decimal("3"), "Food", None, date(2024, 5, 1))
    assert replacement > newest


@pytest.mark.asyncio
async def test_update_and_delete_unknown_ids_are_not_errors(store) -> None:
    """Missing identifiers are reported through the boolean result."""

    await store.initialize()
    assert await store.update(99, Decimal("1"), "Food", None, date(2024, 5, 1)) is False
    assert await store.delete(99) is False
    assert await store.get(99) is None


@pytest.mark.asyncio
async def test_update_rewrites_all_editable_columns(store) -> None:
    """An update replaces amount, category, note and date under the same id."""

    await store.initialize()
    expense_id = await store.insert(Decimal("5"), "Food", "snack", date(2024, 5, 1))
    assert await store.update(expense_id, Decimal("6.25"), "Travel", None, date(2024, 5, 2)) is True

    updated = await store.get(expense_id)
    assert updated.amount == Decimal("6.25")
    assert updated.category == "Travel"
    assert updated.note is None
    assert updated.occurred_on == date(2024, 5, 2)


@pytest.mark.asyncio
async def test_missing_required_fields_raise_constraint_violation(store) -> None:
    """The store refuses rows that skipped engine validation."""

    await store.initialize()
    with pytest.raises(ConstraintViolation):
        await store.insert(Decimal("1"), "   ", None, date(2024, 5, 1))
    with pytest.raises(ConstraintViolation):
        await store.insert(Decimal("0"), "Food", None, date(2024, 5, 1))


@pytest.mark.asyncio
async def test_operations_before_initialize_raise_storage_unavailable(store) -> None:
    """A store that was never opened reports itself unavailable."""

    with pytest.raises(StorageUnavailable):
        await store.list_all()


@pytest.mark.asyncio
async def test_sqlite_store_persists_across_reopen(tmp_path) -> None:
    """Rows written to a file survive closing and reopening the store."""

    database = str(tmp_path / "expenses.db")
    store = SQLiteExpenseStore(database)
    await store.initialize()
    expense_id = await store.insert(Decimal("12.5"), "Food", "lunch", date(2024, 5, 15))
    await store.close()

    reopened = SQLiteExpenseStore(database)
    await reopened.initialize()
    expense = await reopened.get(expense_id)
    await reopened.close()

    assert expense.amount == Decimal("12.5")
    assert expense.category == "Food"
    assert expense.note == "lunch"
    assert expense.occurred_on == date(2024, 5, 15)


@pytest.mark.asyncio
async def test_sqlite_schema_matches_ledger_layout(tmp_path) -> None:
    """The expenses table exposes the documented columns."""

    database = str(tmp_path / "schema.db")
    store = SQLiteExpenseStore(database)
    await store.initialize()
    await store.close()

    with sqlite3.connect(database) as connection:
        columns = [row[1] for row in connection.execute("PRAGMA table_info(expenses)")]
    assert columns == ["id", "amount", "category", "note", "date"]


@pytest.mark.asyncio
async def test_sqlite_store_reads_text_encoded_amounts(tmp_path) -> None:
    """Amounts stored as text are coerced back into decimals."""

    database = str(tmp_path / "legacy.db")
    store = SQLiteExpenseStore(database)
    await store.initialize()
    await store.close()
    with sqlite3.connect(database) as connection:
        connection.execute(
            "INSERT INTO expenses (amount, category, note, date) VALUES ('7.25', 'Books', '', '2024-05-01')"
        )

    await store.initialize()
    (expense,) = await store.list_all()
    await store.close()
    assert expense.amount == Decimal("7.25")
    assert expense.note is None


@pytest.mark.asyncio
async def test_unopenable_database_raises_storage_unavailable(tmp_path) -> None:
    """A path inside a missing directory cannot be opened."""

    store = SQLiteExpenseStore(str(tmp_path / "missing" / "expenses.db"))
    with pytest.raises(StorageUnavailable):
        await store.initialize()


@pytest.mark.asyncio
async def test_closed_store_is_unavailable() -> None:
    """Using a store after close raises instead of silently reopening."""

    store = SQLiteExpenseStore(":memory:")
    await store.initialize()
    await store.close()
    with pytest.raises(StorageUnavailable):
        await store.insert(Decimal("1"), "Food", None, date(2024, 5, 1))
