"""Expense records and the read-only store the agent analyses."""

from __future__ import annotations

from datetime import date as calendar_date
from typing import Iterable, Iterator, Sequence, overload

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNCATEGORIZED = "Uncategorized"


class Expense(BaseModel):
    """One dated transaction paid to a vendor."""

    model_config = ConfigDict(frozen=True)

    date: str
    category: str | None = None
    vendor: str = Field(min_length=1)
    amount: float = Field(ge=0, allow_inf_nan=False)

    @field_validator("date")
    @classmethod
    def validate_iso_date(cls, value: str) -> str:
        # Range filters compare dates as text, so only the canonical form is accepted.
        if len(value) != 10 or calendar_date.fromisoformat(value).isoformat() != value:
            raise ValueError("date must use the YYYY-MM-DD format")
        return value

    @field_validator("category")
    @classmethod
    def blank_category_is_absent(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @property
    def month(self) -> str:
        return self.date[:7]

    @property
    def category_label(self) -> str:
        return self.category or UNCATEGORIZED


class ExpenseStore(Sequence[Expense]):
    """Immutable, ordered collection of expenses for one agent session."""

    def __init__(self, expenses: Iterable[Expense] = ()) -> None:
        self._expenses: tuple[Expense, ...] = tuple(expenses)

    @overload
    def __getitem__(self, index: int) -> Expense: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Expense, ...]: ...

    def __getitem__(self, index):
        return self._expenses[index]

    def __len__(self) -> int:
        return len(self._expenses)

    def __iter__(self) -> Iterator[Expense]:
        return iter(self._expenses)

    def __repr__(self) -> str:
        return f"ExpenseStore({len(self._expenses)} expenses)"

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "ExpenseStore":
        """Validate raw mappings into an ``ExpenseStore``."""
        return cls(Expense.model_validate(record) for record in records)


__all__ = ["Expense", "ExpenseStore", "UNCATEGORIZED"]
