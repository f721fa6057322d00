"""Mini README: Persistence stores for expense records.

Structure:
    * ExpenseStore - abstract async interface the ledger engine talks to.
    * SQLiteExpenseStore - embedded relational store used in deployments.
    * InMemoryExpenseStore - dictionary backed store for tests and demos.

Stores own identifier assignment. Identifiers grow monotonically and are
never reused, even after the newest row is deleted. ``list_all`` always
returns rows newest first (``id`` descending); the dashboard relies on that
ordering for its "recent first" list. Updates and deletes of unknown ids
are reported through their boolean result rather than raised.
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from .errors import ConstraintViolation, StorageUnavailable
from .models import Expense
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS expenses (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        amount REAL NOT NULL CHECK (amount > 0),
        category TEXT NOT NULL CHECK (length(trim(category)) > 0),
        note TEXT,
        date TEXT NOT NULL
    );
"""


def _require_fields(amount: Optional[Decimal], category: Optional[str], occurred_on: Optional[date]) -> None:
    """Reject rows missing a required column before they reach the medium."""

    missing = [
        name
        for name, value in (("amount", amount), ("category", category), ("date", occurred_on))
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise ConstraintViolation(f"Missing required expense fields: {', '.join(missing)}")
    if amount <= 0:
        raise ConstraintViolation(f"Amount must be positive, got {amount}")


class ExpenseStore(ABC):
    """Async interface for expense persistence."""

    @abstractmethod
    async def initialize(self) -> None:
        """Open the medium and create the schema if absent. Idempotent."""

    @abstractmethod
    async def insert(
        self, amount: Decimal, category: str, note: Optional[str], occurred_on: date
    ) -> int:
        """Persist a new expense and return its assigned identifier."""

    @abstractmethod
    async def update(
        self,
        expense_id: int,
        amount: Decimal,
        category: str,
        note: Optional[str],
        occurred_on: date,
    ) -> bool:
        """Rewrite an expense. Returns ``False`` when the id is unknown."""

    @abstractmethod
    async def delete(self, expense_id: int) -> bool:
        """Remove an expense if present. Returns whether a row was removed."""

    @abstractmethod
    async def get(self, expense_id: int) -> Optional[Expense]:
        """Return the expense with ``expense_id`` or ``None``."""

    @abstractmethod
    async def list_all(self) -> List[Expense]:
        """Return every expense ordered by id descending."""

    async def close(self) -> None:
        """Release the medium. The default implementation has nothing to release."""


class SQLiteExpenseStore(ExpenseStore):
    """SQLite-backed expense store holding a single connection."""

    def __init__(self, database: str = ":memory:") -> None:
        self.database = database
        self._connection: Optional[sqlite3.Connection] = None

    def _connect(self) -> sqlite3.Connection:
        if self._connection is None:
            raise StorageUnavailable(f"Expense store at {self.database} is not open")
        return self._connection

    async def initialize(self) -> None:
        if self._connection is not None:
            return
        try:
            connection = sqlite3.connect(self.database)
            connection.row_factory = sqlite3.Row
            connection.executescript(SCHEMA_SQL)
            connection.commit()
        except sqlite3.Error as error:
            LOGGER.error("Unable to open expense store at %s: %s", self.database, error)
            raise StorageUnavailable(f"Cannot open expense store at {self.database}: {error}") from error
        self._connection = connection
        LOGGER.debug("Expense store ready at %s", self.database)

    def _write(self, sql: str, parameters: tuple) -> sqlite3.Cursor:
        """Execute a mutating statement and commit, translating medium errors."""

        connection = self._connect()
        try:
            cursor = connection.execute(sql, parameters)
            connection.commit()
        except sqlite3.IntegrityError as error:
            connection.rollback()
            raise ConstraintViolation(f"Expense rejected by store: {error}") from error
        except sqlite3.Error as error:
            LOGGER.error("Expense store write failed: %s", error)
            raise StorageUnavailable(f"Expense store write failed: {error}") from error
        return cursor

    async def insert(
        self, amount: Decimal, category: str, note: Optional[str], occurred_on: date
    ) -> int:
        _require_fields(amount, category, occurred_on)
        cursor = self._write(
            "INSERT INTO expenses (amount, category, note, date) VALUES (?, ?, ?, ?)",
            (float(amount), category, note, occurred_on.isoformat()),
        )
        return int(cursor.lastrowid)

    async def update(
        self,
        expense_id: int,
        amount: Decimal,
        category: str,
        note: Optional[str],
        occurred_on: date,
    ) -> bool:
        _require_fields(amount, category, occurred_on)
        cursor = self._write(
            "UPDATE expenses SET amount = ?, category = ?, note = ?, date = ? WHERE id = ?",
            (float(amount), category, note, occurred_on.isoformat(), expense_id),
        )
        return cursor.rowcount > 0

    async def delete(self, expense_id: int) -> bool:
        cursor = self._write("DELETE FROM expenses WHERE id = ?", (expense_id,))
        return cursor.rowcount > 0

    async def get(self, expense_id: int) -> Optional[Expense]:
        row = self._connect().execute(
            "SELECT id, amount, category, note, date FROM expenses WHERE id = ?",
            (expense_id,),
        ).fetchone()
        return Expense.from_row(row) if row else None

    async def list_all(self) -> List[Expense]:
        rows = self._connect().execute(
            "SELECT id, amount, category, note, date FROM expenses ORDER BY id DESC"
        ).fetchall()
        return [Expense.from_row(row) for row in rows]

    async def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            LOGGER.debug("Expense store at %s closed", self.database)


class InMemoryExpenseStore(ExpenseStore):
    """Volatile store with the same ordering and id guarantees as SQLite."""

    def __init__(self) -> None:
        self._data: Dict[int, Expense] = {}
        self._sequence = 0
        self._open = False

    def _ensure_open(self) -> None:
        if not self._open:
            raise StorageUnavailable("In-memory expense store is not open")

    async def initialize(self) -> None:
        self._open = True

    async def insert(
        self, amount: Decimal, category: str, note: Optional[str], occurred_on: date
    ) -> int:
        self._ensure_open()
        _require_fields(amount, category, occurred_on)
        self._sequence += 1
        self._data[self._sequence] = Expense(
            expense_id=self._sequence,
            amount=amount,
            category=category,
            note=note,
            occurred_on=occurred_on,
        )
        return self._sequence

    async def update(
        self,
        expense_id: int,
        amount: Decimal,
        category: str,
        note: Optional[str],
        occurred_on: date,
    ) -> bool:
        self._ensure_open()
        _require_fields(amount, category, occurred_on)
        existing = self._data.get(expense_id)
        if existing is None:
            return False
        self._data[expense_id] = existing.with_values(
            amount=amount, category=category, note=note, occurred_on=occurred_on
        )
        return True

    async def delete(self, expense_id: int) -> bool:
        self._ensure_open()
        return self._data.pop(expense_id, None) is not None

    async def get(self, expense_id: int) -> Optional[Expense]:
        self._ensure_open()
        return self._data.get(expense_id)

    async def list_all(self) -> List[Expense]:
        self._ensure_open()
        return [self._data[key] for key in sorted(self._data, reverse=True)]

    async def close(self) -> None:
        self._open = False
