"""Mini README: Interactive interfaces for the expense tracker.

Exports the FastAPI application factory that powers the browser dashboard.
The Typer CLI lives in ``manage_expenses.py`` at the project root.
"""

from .web_app import create_application

__all__ = ["create_application"]
