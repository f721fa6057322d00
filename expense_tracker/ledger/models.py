"""Mini README: Expense record model and value coercion helpers.

Structure:
    * Expense - immutable dataclass for a single spending event.
    * parse_amount - tolerant parser returning ``None`` for unusable input.
    * parse_date / coerce_amount - strict coercion used when reading rows.

The engine relies on ``parse_amount`` returning ``None`` instead of raising
so that bad form input can be ignored without surfacing an error.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional, Union

AmountInput = Union[str, int, float, Decimal]
DateInput = Union[str, date, datetime]


@dataclass(frozen=True, slots=True)
class Expense:
    """A recorded expense. ``expense_id`` is assigned by the store."""

    expense_id: int
    amount: Decimal
    category: str
    occurred_on: date
    note: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Expense":
        """Build an expense from a stored row keyed by column name."""

        return cls(
            expense_id=int(row["id"]),
            amount=coerce_amount(row["amount"]),
            category=str(row["category"]),
            occurred_on=parse_date(row["date"]),
            note=row["note"] if row["note"] else None,
        )

    def with_values(
        self,
        *,
        amount: Decimal,
        category: str,
        note: Optional[str],
        occurred_on: date,
    ) -> "Expense":
        """Return a copy carrying new editable values under the same id."""

        return replace(self, amount=amount, category=category, note=note, occurred_on=occurred_on)

    def as_dict(self) -> Dict[str, object]:
        """Export the expense with JSON friendly values."""

        return {
            "id": self.expense_id,
            "amount": float(self.amount),
            "category": self.category,
            "note": self.note,
            "date": self.occurred_on.isoformat(),
        }


def coerce_amount(value: AmountInput) -> Decimal:
    """Convert stored numerics (including text-encoded ones) into ``Decimal``."""

    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr gives the shortest string that round-trips, so 12.5 stays 12.5
        return Decimal(repr(value))
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as error:
        raise ValueError(f"Amount is not numeric: {value!r}") from error


def parse_amount(raw: Optional[AmountInput]) -> Optional[Decimal]:
    """Return a positive, finite amount or ``None`` when the input is unusable."""

    if raw is None or isinstance(raw, bool):
        return None
    try:
        amount = coerce_amount(raw)
    except ValueError:
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    # Stores keep amounts as doubles; reject values that overflow or round to zero.
    as_float = float(amount)
    if math.isinf(as_float) or as_float <= 0:
        return None
    return amount


def parse_date(value: DateInput) -> date:
    """Parse ISO formatted strings or date objects safely."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip())
    raise ValueError("Dates must be provided as ISO strings or date/datetime instances.")


def clean_text(raw: Optional[str]) -> Optional[str]:
    """Trim user text, mapping blank values to ``None``."""

    if raw is None:
        return None
    trimmed = str(raw).strip()
    return trimmed or None
