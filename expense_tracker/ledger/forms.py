"""Mini README: Immutable entry form state shared by shells and the engine.

``ExpenseForm`` carries the raw text a user typed plus the record being
edited, if any. Shells never mutate it; they build a new form for every
keystroke or render and hand it to ``LedgerEngine.submit_form``, which
returns the form to show next.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from .models import Expense


@dataclass(frozen=True, slots=True)
class ExpenseForm:
    """Raw entry form values. ``editing`` is set while changing an existing record."""

    amount: str = ""
    category: str = ""
    note: str = ""
    editing: Optional[Expense] = None

    @classmethod
    def blank(cls) -> "ExpenseForm":
        return cls()

    @classmethod
    def for_editing(cls, expense: Expense) -> "ExpenseForm":
        """Pre-fill the form from an existing expense."""

        return cls(
            amount=str(expense.amount),
            category=expense.category,
            note=expense.note or "",
            editing=expense,
        )

    @property
    def is_editing(self) -> bool:
        return self.editing is not None

    def with_changes(self, **fields: object) -> "ExpenseForm":
        return replace(self, **fields)
