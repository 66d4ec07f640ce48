"""In-memory analytics helpers used by the agent tool registry.

Every function here is a pure read over an ``ExpenseStore``; results are fresh
lists and dictionaries that can be serialised straight into a tool result.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, Sequence

from expense_agent.schemas import (
    AggregateRequest,
    Expense,
    ExpenseFilter,
    StatisticRequest,
)

from . import stats
from .anomalies import detect_anomalies

ANOMALY_THRESHOLD = 2.0

_STATISTICS: dict[str, Callable[[Sequence[float]], float]] = {
    "sum": stats.total,
    "mean": stats.mean,
    "median": stats.median,
    "min": min,
    "max": max,
}

_GROUP_KEYS: dict[str, Callable[[Expense], str]] = {
    "category": lambda expense: expense.category_label,
    "vendor": lambda expense: expense.vendor,
    "month": lambda expense: expense.month,
}


def _matches(expense: Expense, spec: ExpenseFilter) -> bool:
    if spec.start_date and expense.date < spec.start_date:
        return False
    if spec.end_date and expense.date > spec.end_date:
        return False
    if spec.category and (expense.category or "").lower() != spec.category.lower():
        return False
    if spec.min_amount is not None and expense.amount < spec.min_amount:
        return False
    if spec.max_amount is not None and expense.amount > spec.max_amount:
        return False
    if spec.vendor and spec.vendor.lower() not in expense.vendor.lower():
        return False
    return True


def filter_expenses(expenses: Iterable[Expense], spec: ExpenseFilter) -> list[Expense]:
    """
    Return the expenses satisfying every supplied predicate, in store order.

    Anomaly exclusion runs last, over the set left by the other predicates.
    """
    filtered = [expense for expense in expenses if _matches(expense, spec)]

    if not spec.exclude_anomalies or len(filtered) < 2:
        return filtered

    anomalies = detect_anomalies(filtered, ANOMALY_THRESHOLD)
    return [expense for expense in filtered if expense not in anomalies]


def _group_metric(metric: str, amounts: Sequence[float]) -> float:
    if metric == "count":
        return len(amounts)
    if not amounts:
        return 0
    try:
        compute = _STATISTICS[metric]
    except KeyError:
        raise ValueError(f"Unsupported metric '{metric}'") from None
    return compute(amounts)


def calculate_statistic(
    expenses: Iterable[Expense], request: StatisticRequest
) -> dict[str, Any]:
    """Compute one metric over the filtered expenses."""
    filtered = filter_expenses(expenses, request)
    metric = request.metric
    described = request.describe()

    if metric == "count":
        return {
            "metric": metric,
            "value": len(filtered),
            "count": len(filtered),
            "filter": described,
        }

    if not filtered:
        return {"metric": metric, "value": 0, "count": 0, "filter": described}

    value = _group_metric(metric, [expense.amount for expense in filtered])
    return {
        "metric": metric,
        "value": stats.round2(value),
        "count": len(filtered),
        "filter": described,
    }


def aggregate_expenses(
    expenses: Iterable[Expense], request: AggregateRequest
) -> dict[str, Any]:
    """
    Group the filtered expenses and compute one metric per group.

    Values are rounded before sorting, so groups that tie at two decimals keep
    the order in which they were first seen.
    """
    filtered = filter_expenses(expenses, request)
    key_for = _GROUP_KEYS[request.group_by]

    groups: dict[str, list[float]] = {}
    for expense in filtered:
        groups.setdefault(key_for(expense), []).append(expense.amount)

    entries = [
        {
            "key": key,
            "value": stats.round2(_group_metric(request.metric, amounts)),
            "count": len(amounts),
        }
        for key, amounts in groups.items()
    ]
    entries.sort(key=lambda entry: entry["value"], reverse=True)

    return {
        "groupBy": request.group_by,
        "metric": request.metric,
        "count": len(filtered),
        "filter": request.describe(),
        "entries": entries,
    }


__all__ = [
    "ANOMALY_THRESHOLD",
    "aggregate_expenses",
    "calculate_statistic",
    "filter_expenses",
]
