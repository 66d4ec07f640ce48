"""Analytics tool entrypoints exposed to the agent."""
from .analytics import (
    ANOMALY_THRESHOLD,
    aggregate_expenses,
    calculate_statistic,
    filter_expenses,
)
from .anomalies import detect_anomalies
from .types import ToolCall, ToolResult

__all__ = [
    "ANOMALY_THRESHOLD",
    "aggregate_expenses",
    "calculate_statistic",
    "detect_anomalies",
    "filter_expenses",
    "ToolCall",
    "ToolResult",
]
