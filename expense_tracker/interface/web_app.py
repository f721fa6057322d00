"""Mini README: FastAPI dashboard for the expense ledger.

Structure:
    * create_application - application factory wiring routes, templates and
      the ledger engine lifecycle.
    * HTML routes - dashboard, edit form, form submission and deletion.
    * JSON routes - ``/api/expenses`` for scripted access to the same engine.

The dashboard holds no state of its own. Every request rebuilds the view
from the engine snapshot and the ``window`` query parameter, and every
mutation goes through the engine.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from ..configuration import ExpenseTrackerSettings, get_settings
from ..ledger import (
    ExpenseForm,
    LedgerChange,
    LedgerEngine,
    SQLiteExpenseStore,
    StorageUnavailable,
    TimeWindow,
    summarise,
)
from ..logging_utils import configure_root_logger, get_logger

LOGGER = get_logger(__name__)


def format_amount(value: Decimal) -> str:
    """Render an amount the way the dashboard shows currency."""

    return f"${Decimal(value):.2f}"


def _parse_window(value: str) -> TimeWindow:
    try:
        return TimeWindow.from_str(value)
    except ValueError as error:
        raise HTTPException(status_code=400, detail=str(error)) from error


def create_application(
    engine: Optional[LedgerEngine] = None,
    settings: Optional[ExpenseTrackerSettings] = None,
    today: Callable[[], date] = date.today,
) -> FastAPI:
    """Create the FastAPI application with routes and the ledger engine."""

    settings = settings or get_settings()
    configure_root_logger(settings.log_level)
    engine = engine or LedgerEngine(SQLiteExpenseStore(settings.database_target), today=today)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        LOGGER.info("Opening expense ledger (%s)", settings.environment)
        await engine.start()
        yield
        await engine.close()
        LOGGER.info("Expense ledger closed")

    app = FastAPI(title="Expense Tracker", version="1.0.0", lifespan=lifespan)
    app.state.engine = engine
    templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
    templates.env.filters["money"] = format_amount

    @app.exception_handler(StorageUnavailable)
    async def storage_unavailable(request: Request, error: StorageUnavailable) -> JSONResponse:
        LOGGER.error("Storage unavailable while serving %s: %s", request.url.path, error)
        return JSONResponse({"detail": str(error)}, status_code=503)

    def render_dashboard(request: Request, window: TimeWindow, form: ExpenseForm) -> HTMLResponse:
        summary = summarise(engine.list_expenses(), window, today(), settings.first_weekday)
        LOGGER.debug(
            "Rendering dashboard window=%s expenses=%s total=%s",
            window.label,
            len(summary.expenses),
            summary.total,
        )
        return templates.TemplateResponse(
            request,
            "dashboard.html",
            {
                "summary": summary,
                "windows": list(TimeWindow),
                "form": form,
            },
        )

    def redirect_to_dashboard(window: TimeWindow) -> RedirectResponse:
        return RedirectResponse(url=f"/?window={window.value}", status_code=303)

    def change_payload(change: LedgerChange, window: TimeWindow) -> JSONResponse:
        summary = summarise(change.snapshot, window, today(), settings.first_weekday)
        payload = summary.as_dict()
        payload["applied"] = change.applied
        payload["expense"] = change.expense.as_dict() if change.expense else None
        return JSONResponse(payload)

    @app.get("/", response_class=HTMLResponse)
    async def dashboard(request: Request, window: str = "all") -> HTMLResponse:
        """Render totals, the entry form and the expense list."""

        return render_dashboard(request, _parse_window(window), ExpenseForm.blank())

    @app.get("/edit/{expense_id}", response_class=HTMLResponse)
    async def edit_expense(request: Request, expense_id: int, window: str = "all") -> HTMLResponse:
        """Render the dashboard with the form pre-filled for an existing expense."""

        selected = next(
            (expense for expense in engine.list_expenses() if expense.expense_id == expense_id),
            None,
        )
        if selected is None:
            raise HTTPException(status_code=404, detail=f"Expense {expense_id} not found")
        return render_dashboard(request, _parse_window(window), ExpenseForm.for_editing(selected))

    @app.post("/submit")
    async def submit_expense(
        amount: str = Form(""),
        category: str = Form(""),
        note: str = Form(""),
        editing_id: Optional[int] = Form(None),
        window: str = Form("all"),
    ) -> RedirectResponse:
        """Save the entry form, adding or updating depending on ``editing_id``."""

        editing = None
        if editing_id is not None:
            editing = next(
                (expense for expense in engine.list_expenses() if expense.expense_id == editing_id),
                None,
            )
        form = ExpenseForm(amount=amount, category=category, note=note, editing=editing)
        if editing_id is not None and editing is None:
            LOGGER.info("Edit target %s disappeared; ignoring submission", editing_id)
        else:
            _, change = await engine.submit_form(form)
            LOGGER.debug("Form submission applied=%s", change.applied)
        return redirect_to_dashboard(_parse_window(window))

    @app.post("/delete/{expense_id}")
    async def delete_expense(expense_id: int, window: str = Form("all")) -> RedirectResponse:
        """Delete an expense and return to the dashboard."""

        await engine.delete_expense(expense_id)
        return redirect_to_dashboard(_parse_window(window))

    @app.get("/api/expenses")
    async def list_expenses(window: str = "all") -> JSONResponse:
        """Return the filtered expenses and their totals."""

        summary = summarise(
            engine.list_expenses(), _parse_window(window), today(), settings.first_weekday
        )
        return JSONResponse(summary.as_dict())

    @app.post("/api/expenses")
    async def add_expense(
        amount: str = Form(""),
        category: str = Form(""),
        note: str = Form(""),
        occurred_on: Optional[str] = Form(None, alias="date"),
        window: str = "all",
    ) -> JSONResponse:
        """Add an expense; unusable input is reported with ``applied: false``."""

        selected_window = _parse_window(window)
        change = await engine.add_expense(amount, category, note, occurred_on=occurred_on)
        return change_payload(change, selected_window)

    @app.put("/api/expenses/{expense_id}")
    async def update_expense(
        expense_id: int,
        amount: str = Form(""),
        category: str = Form(""),
        note: str = Form(""),
        occurred_on: Optional[str] = Form(None, alias="date"),
        window: str = "all",
    ) -> JSONResponse:
        """Update an expense; unknown ids and unusable input leave the ledger as is."""

        selected_window = _parse_window(window)
        change = await engine.update_expense(expense_id, amount, category, note, occurred_on=occurred_on)
        return change_payload(change, selected_window)

    @app.delete("/api/expenses/{expense_id}")
    async def remove_expense(expense_id: int, window: str = "all") -> JSONResponse:
        """Delete an expense. Repeated deletes succeed with ``applied: false``."""

        selected_window = _parse_window(window)
        change = await engine.delete_expense(expense_id)
        return change_payload(change, selected_window)

    return app
