"""Mini README: Exceptions raised by the expense ledger.

Invalid user input is deliberately absent from this module: a bad amount
or an empty category is a silent no-op in the engine, not an error. Only
storage level failures are represented here.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for ledger failures."""


class StorageUnavailable(LedgerError):
    """The persistence medium could not be opened, or was used while closed."""


class ConstraintViolation(LedgerError):
    """The store rejected a malformed record."""
