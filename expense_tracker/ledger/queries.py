"""Mini README: Pure time-window filtering and aggregation over a snapshot.

Structure:
    * TimeWindow - enum of the dashboard filters (All, This Week, This Month).
    * filter_by_window - select expenses falling inside a window.
    * total_amount / totals_by_category - sums over a filtered selection.
    * LedgerSummary / summarise - bundle used by shells to render one view.

Nothing here performs I/O or keeps state; every render re-derives the view
from the latest engine snapshot and the selected window. Dates are compared
as calendar dates only.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from .models import Expense, coerce_amount

DateLike = Union[date, datetime]


class TimeWindow(str, Enum):
    """Enumerate the supported dashboard filters."""

    ALL = "all"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def from_str(cls, value: str) -> "TimeWindow":
        """Accept labels ("This Week") and identifiers ("ThisWeek", "this_week")."""

        try:
            normalised = "".join(ch for ch in value.strip().lower() if ch.isalnum())
            return _ALIASES[normalised]
        except (KeyError, AttributeError) as error:
            raise ValueError(f"Unsupported time window: {value}") from error


_LABELS = {
    TimeWindow.ALL: "All",
    TimeWindow.THIS_WEEK: "This Week",
    TimeWindow.THIS_MONTH: "This Month",
}
_ALIASES = {window.value.replace("_", ""): window for window in TimeWindow}


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def week_bounds(reference_now: DateLike, first_weekday: int = calendar.SUNDAY) -> Tuple[date, date]:
    """Return the inclusive first and last day of the week containing ``reference_now``."""

    today = _as_date(reference_now)
    start = today - timedelta(days=(today.weekday() - first_weekday) % 7)
    return start, start + timedelta(days=6)


def filter_by_window(
    snapshot: Sequence[Expense],
    window: TimeWindow,
    reference_now: DateLike,
    first_weekday: int = calendar.SUNDAY,
) -> List[Expense]:
    """Return the expenses inside ``window``, preserving snapshot order."""

    if window is TimeWindow.ALL:
        return list(snapshot)

    today = _as_date(reference_now)
    if window is TimeWindow.THIS_WEEK:
        start, end = week_bounds(today, first_weekday)
        return [expense for expense in snapshot if start <= expense.occurred_on <= end]
    if window is TimeWindow.THIS_MONTH:
        return [
            expense
            for expense in snapshot
            if (expense.occurred_on.year, expense.occurred_on.month) == (today.year, today.month)
        ]
    raise ValueError(f"Unsupported time window: {window}")


def total_amount(expenses: Iterable[Expense]) -> Decimal:
    """Sum amounts, coercing text-encoded values. Empty input totals zero."""

    return sum((coerce_amount(expense.amount) for expense in expenses), Decimal("0"))


def totals_by_category(expenses: Iterable[Expense]) -> Dict[str, Decimal]:
    """Map each category to its summed amount in a single pass."""

    totals: Dict[str, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, Decimal("0")) + coerce_amount(
            expense.amount
        )
    return totals


@dataclass(frozen=True, slots=True)
class LedgerSummary:
    """Everything a shell needs to render one filtered view."""

    window: TimeWindow
    expenses: Tuple[Expense, ...]
    total: Decimal
    category_totals: Dict[str, Decimal]

    def as_dict(self) -> Dict[str, object]:
        return {
            "window": self.window.label,
            "expenses": [expense.as_dict() for expense in self.expenses],
            "total": float(self.total),
            "totals_by_category": {
                category: float(amount) for category, amount in self.category_totals.items()
            },
        }


def summarise(
    snapshot: Sequence[Expense],
    window: TimeWindow,
    reference_now: DateLike,
    first_weekday: int = calendar.SUNDAY,
) -> LedgerSummary:
    """Filter the snapshot and compute its totals in one call."""

    selected = filter_by_window(snapshot, window, reference_now, first_weekday)
    return LedgerSummary(
        window=window,
        expenses=tuple(selected),
        total=total_amount(selected),
        category_totals=totals_by_category(selected),
    )
