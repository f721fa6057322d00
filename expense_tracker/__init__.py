"""Mini README: Core package initialiser for the expense tracker.

The package is split into ``ledger`` (persistence, the ledger engine and
pure aggregation helpers) and ``interface`` (the FastAPI dashboard that
calls into the engine). Only the logging helper is re-exported here so
importing the package stays free of web dependencies.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
