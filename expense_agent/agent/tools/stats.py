"""Numeric helpers shared by the statistics and aggregation tools."""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

_CENTS = Decimal("0.01")


def total(values: Sequence[float]) -> float:
    return math.fsum(values)


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return total(values) / len(values)


def median(values: Sequence[float]) -> float:
    """Middle value of the sorted sequence, averaging the two central values."""
    if not values:
        return 0.0
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[middle]
    return (ordered[middle - 1] + ordered[middle]) / 2


def population_stddev(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    centre = mean(values)
    return math.sqrt(math.fsum((value - centre) ** 2 for value in values) / len(values))


def round2(value: float) -> float:
    """Round half away from zero on the exact binary value, as currency displays do.

    Integers, such as group counts, come back unchanged.
    """
    if isinstance(value, int):
        return value
    return float(Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP))
