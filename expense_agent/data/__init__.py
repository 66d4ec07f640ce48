"""Expense ingestion helpers."""
from .loader import ExpenseLoadError, load_expenses

__all__ = ["ExpenseLoadError", "load_expenses"]
