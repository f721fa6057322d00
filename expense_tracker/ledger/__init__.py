"""Mini README: Expense ledger core.

This package holds the persistence stores, the ledger engine that mediates
every change, immutable form state and the pure query helpers used to
filter and total a snapshot. Shells import from here rather than from the
individual modules.
"""

from .engine import LedgerChange, LedgerEngine
from .errors import ConstraintViolation, LedgerError, StorageUnavailable
from .forms import ExpenseForm
from .models import Expense
from .queries import (
    LedgerSummary,
    TimeWindow,
    filter_by_window,
    summarise,
    total_amount,
    totals_by_category,
    week_bounds,
)
from .store import ExpenseStore, InMemoryExpenseStore, SQLiteExpenseStore

__all__ = [
    "ConstraintViolation",
    "Expense",
    "ExpenseForm",
    "ExpenseStore",
    "InMemoryExpenseStore",
    "LedgerChange",
    "LedgerEngine",
    "LedgerError",
    "LedgerSummary",
    "SQLiteExpenseStore",
    "StorageUnavailable",
    "TimeWindow",
    "filter_by_window",
    "summarise",
    "total_amount",
    "totals_by_category",
    "week_bounds",
]
