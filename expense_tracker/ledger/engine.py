"""Mini README: Ledger engine mediating every expense mutation.

Structure:
    * LedgerChange - result of a mutation (applied flag, record, snapshot).
    * LedgerEngine - validates raw input, delegates to an ``ExpenseStore`` and
      keeps the in-memory snapshot in step with the store.

The store is authoritative; the snapshot is a cache reloaded in full after
every applied mutation and replaced in a single assignment. Input that
cannot be used (an amount that is not a positive number, a blank category,
an unknown id) is ignored without raising: the call reports
``applied=False`` and hands back the very same snapshot object. Callers are
expected to await one operation before issuing the next.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Tuple

from .forms import ExpenseForm
from .models import AmountInput, DateInput, Expense, clean_text, parse_amount, parse_date
from .store import ExpenseStore
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

Snapshot = Tuple[Expense, ...]


@dataclass(frozen=True, slots=True)
class LedgerChange:
    """Outcome of a ledger mutation."""

    applied: bool
    snapshot: Snapshot
    expense: Optional[Expense] = None


class LedgerEngine:
    """Own the canonical expense snapshot and every write path into the store."""

    def __init__(
        self,
        store: ExpenseStore,
        *,
        today: Callable[[], date] = date.today,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._store = store
        self._today = today
        self._logger = logger or LOGGER
        self._snapshot: Snapshot = ()

    @property
    def store(self) -> ExpenseStore:
        return self._store

    async def start(self) -> Snapshot:
        """Initialise the store and load the first snapshot. Failures are fatal."""

        await self._store.initialize()
        snapshot = await self.refresh()
        self._logger.info("Ledger engine started with %s expenses", len(snapshot))
        return snapshot

    async def close(self) -> None:
        await self._store.close()

    async def refresh(self) -> Snapshot:
        """Reload the snapshot from the store and swap it in."""

        self._snapshot = tuple(await self._store.list_all())
        self._logger.debug("Snapshot reloaded with %s expenses", len(self._snapshot))
        return self._snapshot

    def today(self) -> date:
        """Return the current calendar day according to the engine clock."""

        return self._today()

    def list_expenses(self) -> Snapshot:
        """Return the current snapshot, newest expense first."""

        return self._snapshot

    def _unchanged(self, reason: str, *args: object) -> LedgerChange:
        self._logger.debug("Ignoring ledger input: " + reason, *args)
        return LedgerChange(applied=False, snapshot=self._snapshot)

    @staticmethod
    def _resolve_date(value: Optional[DateInput], fallback: date) -> Optional[date]:
        if value is None or value == "":
            return fallback
        try:
            return parse_date(value)
        except ValueError:
            return None

    async def add_expense(
        self,
        amount_raw: Optional[AmountInput],
        category_raw: Optional[str],
        note_raw: Optional[str] = "",
        occurred_on: Optional[DateInput] = None,
    ) -> LedgerChange:
        """Record a new expense, ignoring unusable input."""

        amount = parse_amount(amount_raw)
        if amount is None:
            return self._unchanged("amount %r is not a positive number", amount_raw)
        category = clean_text(category_raw)
        if category is None:
            return self._unchanged("category is blank")
        expense_date = self._resolve_date(occurred_on, self.today())
        if expense_date is None:
            return self._unchanged("date %r is not an ISO calendar date", occurred_on)
        note = clean_text(note_raw)

        expense_id = await self._store.insert(amount, category, note, expense_date)
        snapshot = await self.refresh()
        created = next(
            (expense for expense in snapshot if expense.expense_id == expense_id),
            Expense(expense_id, amount, category, expense_date, note),
        )
        self._logger.info(
            "Added expense %s: %s in %s on %s", expense_id, amount, category, expense_date
        )
        return LedgerChange(applied=True, snapshot=snapshot, expense=created)

    async def update_expense(
        self,
        expense_id: int,
        amount_raw: Optional[AmountInput],
        category_raw: Optional[str],
        note_raw: Optional[str] = "",
        occurred_on: Optional[DateInput] = None,
    ) -> LedgerChange:
        """Rewrite an existing expense, keeping its date unless one is supplied."""

        amount = parse_amount(amount_raw)
        if amount is None:
            return self._unchanged("amount %r is not a positive number", amount_raw)
        category = clean_text(category_raw)
        if category is None:
            return self._unchanged("category is blank")

        # The stored row supplies the date kept when no override is given.
        existing = await self._store.get(expense_id)
        if existing is None:
            return self._unchanged("expense %s no longer exists", expense_id)
        expense_date = self._resolve_date(occurred_on, existing.occurred_on)
        if expense_date is None:
            return self._unchanged("date %r is not an ISO calendar date", occurred_on)
        note = clean_text(note_raw)

        if not await self._store.update(expense_id, amount, category, note, expense_date):
            return self._unchanged("expense %s vanished before it could be updated", expense_id)
        snapshot = await self.refresh()
        updated = next(
            (expense for expense in snapshot if expense.expense_id == expense_id),
            existing.with_values(amount=amount, category=category, note=note, occurred_on=expense_date),
        )
        self._logger.info("Updated expense %s", expense_id)
        return LedgerChange(applied=True, snapshot=snapshot, expense=updated)

    async def delete_expense(self, expense_id: int) -> LedgerChange:
        """Delete an expense. Deleting an unknown id is a successful no-op."""

        removed = await self._store.delete(expense_id)
        snapshot = await self.refresh()
        if removed:
            self._logger.info("Deleted expense %s", expense_id)
        else:
            self._logger.debug("Expense %s was already absent", expense_id)
        return LedgerChange(applied=removed, snapshot=snapshot)

    async def submit_form(self, form: ExpenseForm) -> Tuple[ExpenseForm, LedgerChange]:
        """Save a form, returning a blank form on success or the same form otherwise."""

        if form.editing is not None:
            change = await self.update_expense(
                form.editing.expense_id, form.amount, form.category, form.note
            )
        else:
            change = await self.add_expense(form.amount, form.category, form.note)
        return (ExpenseForm.blank() if change.applied else form), change
