"""Pydantic schemas for expense records and tool inputs."""

from .expenses import UNCATEGORIZED, Expense, ExpenseStore
from .tool_inputs import (
    AggregateMetric,
    AggregateRequest,
    ExpenseFilter,
    GroupByField,
    StatisticMetric,
    StatisticRequest,
)

__all__ = [
    "AggregateMetric",
    "AggregateRequest",
    "Expense",
    "ExpenseFilter",
    "ExpenseStore",
    "GroupByField",
    "StatisticMetric",
    "StatisticRequest",
    "UNCATEGORIZED",
]
