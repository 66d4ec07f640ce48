"""Load expense records from JSON or CSV files into an ``ExpenseStore``."""
from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterator

from pydantic import ValidationError

from expense_agent.core.log import get_logger, timeit
from expense_agent.schemas import Expense, ExpenseStore

logger = get_logger(__name__)


class ExpenseLoadError(Exception):
    """The expense file is missing, unreadable, or holds invalid records."""


def _read_json(path: Path) -> list[dict]:
    with path.open(encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("expenses")
    if not isinstance(data, list):
        raise ExpenseLoadError(f"{path} must contain a list of expenses")
    return data


def _read_csv(path: Path) -> Iterator[dict]:
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for row in reader:
            yield {
                key.strip(): (value.strip() if isinstance(value, str) else value)
                for key, value in row.items()
                if key
            }


def load_expenses(path: str | Path) -> ExpenseStore:
    """Read and validate every record; a single invalid row rejects the file."""
    path = Path(path)
    if not path.exists():
        raise ExpenseLoadError(f"Expense file not found: {path}")

    suffix = path.suffix.lower()
    expenses: list[Expense] = []
    with timeit(f"Loading {path.name}", logger=logger, unit="expenses") as timer:
        try:
            if suffix == ".json":
                rows = _read_json(path)
            elif suffix == ".csv":
                rows = list(_read_csv(path))
            else:
                raise ExpenseLoadError(f"Unsupported expense file type: {suffix or path.name}")
        except (OSError, json.JSONDecodeError) as exc:
            raise ExpenseLoadError(f"Could not read {path}: {exc}") from exc

        for index, row in enumerate(rows, start=1):
            try:
                expenses.append(Expense.model_validate(row))
            except ValidationError as exc:
                raise ExpenseLoadError(f"Invalid expense #{index} in {path}: {exc}") from exc
            timer.add()

    return ExpenseStore(expenses)


__all__ = ["ExpenseLoadError", "load_expenses"]
