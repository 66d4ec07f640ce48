"""Outlier detection over expense amounts."""
from __future__ import annotations

from typing import Sequence

from expense_agent.schemas import Expense

from .stats import mean, population_stddev


def detect_anomalies(
    expenses: Sequence[Expense], threshold_multiplier: float
) -> set[Expense]:
    """
    Flag expenses whose amount deviates from the mean by more than
    ``threshold_multiplier`` population standard deviations.

    An amount sitting exactly on the threshold is not an anomaly. Fewer than two
    expenses, or a set where every amount is equal, yields no anomalies.
    """
    if len(expenses) < 2:
        return set()

    amounts = [expense.amount for expense in expenses]
    centre = mean(amounts)
    deviation = population_stddev(amounts)
    if deviation == 0:
        return set()

    limit = threshold_multiplier * deviation
    return {expense for expense in expenses if abs(expense.amount - centre) > limit}
