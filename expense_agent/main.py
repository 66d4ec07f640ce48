"""FastAPI application factory for the expense agent.

Run with ``uvicorn --factory expense_agent.main:create_app``.
"""
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from expense_agent.agent import configure_dependencies, router as agent_router
from expense_agent.core import Settings, get_logger, get_settings
from expense_agent.core.log import init_logging
from expense_agent.data import load_expenses
from expense_agent.schemas import ExpenseStore

LOGGER = get_logger(__name__)


def create_app(
    store: Optional[ExpenseStore] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    init_logging(level=settings.log_level, log_dir=settings.log_dir)

    if store is None:
        store = load_expenses(settings.expenses_path)
        LOGGER.info("Loaded %d expenses from %s", len(store), settings.expenses_path)

    app = FastAPI(title="Expense Insights Agent", version="0.1.0")
    configure_dependencies(
        store,
        default_model=settings.default_provider,
        today=settings.today,
        max_sessions=settings.max_sessions,
    )
    app.include_router(agent_router)

    LOGGER.info("FastAPI application initialised")
    return app
