"""Mini README: Entry point CLI for the expense tracker.

This script exposes a Typer CLI that starts the FastAPI dashboard and
offers quick ledger commands (add, edit, delete, list) against the
configured SQLite file. Every command goes through the ledger engine, so
input the dashboard would ignore is ignored here too.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import typer
import uvicorn

from expense_tracker.configuration import get_settings
from expense_tracker.ledger import (
    LedgerChange,
    LedgerEngine,
    LedgerError,
    SQLiteExpenseStore,
    TimeWindow,
    summarise,
)
from expense_tracker.interface.web_app import format_amount
from expense_tracker.logging_utils import configure_root_logger

cli = typer.Typer(help="Record and review personal expenses.")

T = TypeVar("T")


def _with_engine(action: Callable[[LedgerEngine], Awaitable[T]]) -> T:
    """Start an engine on the configured database, run ``action`` and close it."""

    settings = get_settings()
    configure_root_logger(settings.log_level)

    async def runner() -> T:
        engine = LedgerEngine(SQLiteExpenseStore(settings.database_target))
        await engine.start()
        try:
            return await action(engine)
        finally:
            await engine.close()

    try:
        return asyncio.run(runner())
    except LedgerError as error:
        typer.echo(f"Ledger error: {error}", err=True)
        raise typer.Exit(code=1) from error


def _report(change: LedgerChange, verb: str) -> None:
    if change.applied and change.expense is not None:
        expense = change.expense
        typer.echo(
            f"{verb} #{expense.expense_id}: {format_amount(expense.amount)} "
            f"{expense.category} on {expense.occurred_on.isoformat()}"
        )
    elif change.applied:
        typer.echo(f"{verb}.")
    else:
        typer.echo("Nothing changed.")


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the dashboard using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    # Browsers cannot open the 0.0.0.0 wildcard, so point them at localhost.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting Expense Tracker on {effective_host}:{effective_port}.\n"
        f"Open your browser at http://{browser_host}:{effective_port}"
    )
    uvicorn.run(
        "expense_tracker.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command("init-db")
def init_db() -> None:
    """Create the expense table if it does not exist yet."""

    async def action(engine: LedgerEngine) -> int:
        return len(engine.list_expenses())

    count = _with_engine(action)
    typer.echo(f"Ledger ready at {get_settings().database_target} ({count} expenses).")


@cli.command()
def add(
    amount: str = typer.Argument(..., help="Amount spent, e.g. 12.50."),
    category: str = typer.Argument(..., help="Free-form category such as Food or Rent."),
    note: str = typer.Option("", help="Optional note."),
    on: Optional[str] = typer.Option(None, help="Date as YYYY-MM-DD (defaults to today)."),
) -> None:
    """Record a new expense."""

    async def action(engine: LedgerEngine) -> LedgerChange:
        return await engine.add_expense(amount, category, note, occurred_on=on)

    _report(_with_engine(action), "Added")


@cli.command()
def edit(
    expense_id: int = typer.Argument(..., help="Identifier shown by 'list'."),
    amount: str = typer.Argument(...),
    category: str = typer.Argument(...),
    note: str = typer.Option("", help="Replacement note; blank clears it."),
    on: Optional[str] = typer.Option(None, help="New date as YYYY-MM-DD (keeps the old one if omitted)."),
) -> None:
    """Rewrite an existing expense."""

    async def action(engine: LedgerEngine) -> LedgerChange:
        return await engine.update_expense(expense_id, amount, category, note, occurred_on=on)

    _report(_with_engine(action), "Updated")


@cli.command()
def delete(expense_id: int = typer.Argument(..., help="Identifier shown by 'list'.")) -> None:
    """Delete an expense. Unknown identifiers are ignored."""

    async def action(engine: LedgerEngine) -> LedgerChange:
        return await engine.delete_expense(expense_id)

    _report(_with_engine(action), f"Deleted #{expense_id}")


@cli.command("list")
def list_expenses(
    window: str = typer.Option("All", help="All, 'This Week' or 'This Month'."),
) -> None:
    """Print expenses in a time window with their totals."""

    try:
        selected = TimeWindow.from_str(window)
    except ValueError as error:
        raise typer.BadParameter(str(error)) from error

    async def action(engine: LedgerEngine):
        return summarise(
            engine.list_expenses(), selected, engine.today(), get_settings().first_weekday
        )

    summary = _with_engine(action)
    if not summary.expenses:
        typer.echo("No expenses yet.")
    for expense in summary.expenses:
        note = f" ({expense.note})" if expense.note else ""
        typer.echo(
            f"#{expense.expense_id:<4} {expense.occurred_on.isoformat()} "
            f"{format_amount(expense.amount):>10} {expense.category}{note}"
        )
    typer.echo(f"Total ({summary.window.label}): {format_amount(summary.total)}")
    for category, amount in summary.category_totals.items():
        typer.echo(f"  {category}: {format_amount(amount)}")


if __name__ == "__main__":
    cli()
