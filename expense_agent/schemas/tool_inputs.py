"""Input shapes accepted by the analytics tools.

Field names are exposed to the model in camelCase (``startDate``,
``excludeAnomalies``) while Python code uses the snake_case attributes.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

StatisticMetric = Literal["sum", "mean", "median", "min", "max", "count"]
AggregateMetric = Literal["sum", "count", "mean", "median"]
GroupByField = Literal["category", "vendor", "month"]


class ExpenseFilter(BaseModel):
    """Conjunctive predicates applied before any statistic or aggregation."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    start_date: Optional[str] = Field(
        default=None, description="Inclusive start date in YYYY-MM-DD format."
    )
    end_date: Optional[str] = Field(
        default=None, description="Inclusive end date in YYYY-MM-DD format."
    )
    category: Optional[str] = Field(
        default=None,
        description="Expense category, e.g. Groceries, Dining, Entertainment.",
    )
    min_amount: Optional[float] = Field(
        default=None, description="Minimum transaction amount in USD."
    )
    max_amount: Optional[float] = Field(
        default=None, description="Maximum transaction amount in USD."
    )
    vendor: Optional[str] = Field(
        default=None, description="Case-insensitive vendor match by partial name."
    )
    exclude_anomalies: Optional[bool] = Field(
        default=None,
        description="Set true when the user asks to exclude outliers/anomalies.",
    )

    def as_filter(self) -> "ExpenseFilter":
        """Strip tool-specific fields, keeping only the filter predicates."""
        if type(self) is ExpenseFilter:
            return self
        fields = set(ExpenseFilter.model_fields)
        return ExpenseFilter(**self.model_dump(include=fields))

    def describe(self) -> dict[str, Any]:
        """Supplied filter fields keyed by their external names."""
        return self.as_filter().model_dump(by_alias=True, exclude_none=True)


class StatisticRequest(ExpenseFilter):
    """A filter plus the single metric to compute over the matches."""

    metric: StatisticMetric = Field(
        description="Metric to compute for filtered transactions."
    )


class AggregateRequest(ExpenseFilter):
    """A filter plus the grouping dimension and per-group metric."""

    group_by: GroupByField = Field(description="Dimension used for grouping results.")
    metric: AggregateMetric = Field(description="Metric to compute per group.")


__all__ = [
    "AggregateMetric",
    "AggregateRequest",
    "ExpenseFilter",
    "GroupByField",
    "StatisticMetric",
    "StatisticRequest",
]
