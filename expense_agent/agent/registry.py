"""Tool registry exposing the analytics helpers to the reasoning model."""
from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Sequence

from pydantic import BaseModel, ValidationError

from expense_agent.core.log import get_logger, timeit
from expense_agent.schemas import (
    AggregateRequest,
    ExpenseFilter,
    ExpenseStore,
    StatisticRequest,
)

from .config import agent_config
from .errors import ToolError, ToolExecutionError, ToolInputError, UnknownToolError
from .tools import (
    ToolCall,
    ToolResult,
    aggregate_expenses,
    calculate_statistic,
    filter_expenses,
)

logger = get_logger(__name__)

Payload = Dict[str, Any]


def _keep(payload: Payload) -> Payload:
    return payload


@dataclass(frozen=True)
class ToolSpec:
    """Registry entry describing a callable analytics tool."""

    name: str
    description: str
    input_model: type[BaseModel]
    handler: Callable[[ExpenseStore, Any], Payload]
    summarize_for_memory: Callable[[Payload], Payload] = _keep

    def declaration(self) -> dict[str, Any]:
        """Name, description and JSON schema handed to the model."""
        schema = self.input_model.model_json_schema(by_alias=True)
        schema.pop("title", None)
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": schema,
        }


def run_filter_tool(store: ExpenseStore, spec: ExpenseFilter) -> Payload:
    filtered = filter_expenses(store, spec)
    return {
        "metadata": {
            "totalMatching": len(filtered),
            "filter": spec.describe(),
        },
        "expenses": [expense.model_dump() for expense in filtered],
    }


def summarize_filter_result(payload: Payload, *, limit: int) -> Payload:
    """Keep at most ``limit`` example expenses while preserving the true total."""
    expenses = payload.get("expenses")
    if expenses is None or len(expenses) <= limit:
        return payload
    return {
        "metadata": {
            **payload.get("metadata", {}),
            "truncated": True,
            "returnedExamples": limit,
        },
        "expenses": expenses[:limit],
    }


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "input"
        problems.append(f"{location}: {error.get('msg')}")
    return "; ".join(problems)


class ToolRegistry:
    """Central registry for agent tool calls."""

    def __init__(self, filter_result_limit: int | None = None) -> None:
        limit = (
            agent_config.filter_result_limit
            if filter_result_limit is None
            else filter_result_limit
        )
        self._tools: Dict[str, ToolSpec] = {
            "filter_expenses": ToolSpec(
                name="filter_expenses",
                description=(
                    "Return the matching transactions. Use this for listing expenses "
                    "or getting transaction-level details."
                ),
                input_model=ExpenseFilter,
                handler=run_filter_tool,
                summarize_for_memory=partial(summarize_filter_result, limit=limit),
            ),
            "calculate_statistics": ToolSpec(
                name="calculate_statistics",
                description=(
                    "Calculate a single metric (sum, mean, median, min, max, count) "
                    "over filtered expenses."
                ),
                input_model=StatisticRequest,
                handler=calculate_statistic,
            ),
            "aggregate_expenses": ToolSpec(
                name="aggregate_expenses",
                description=(
                    "Group filtered expenses and compute one metric per group, useful "
                    "for category/month/vendor breakdowns."
                ),
                input_model=AggregateRequest,
                handler=aggregate_expenses,
            ),
        }

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def declarations(self) -> list[dict[str, Any]]:
        """Tool declarations in registration order."""
        return [spec.declaration() for spec in self._tools.values()]

    def describe_for_prompt(self) -> str:
        """Human-readable list of tools for the system prompt."""
        return "\n".join(
            f"- {spec.name}: {spec.description}" for spec in self._tools.values()
        )

    def execute(self, call: ToolCall, store: ExpenseStore) -> ToolResult:
        """Run one tool call; failures come back as ``{"error": ...}`` results."""
        try:
            payload = self._invoke(call, store)
        except ToolError as exc:
            return ToolResult.failure(call, str(exc))
        return ToolResult(call_id=call.id, name=call.name, payload=payload)

    def execute_calls(
        self, calls: Sequence[ToolCall], store: ExpenseStore
    ) -> list[ToolResult]:
        """Run tool calls one after another, preserving request order."""
        return [self.execute(call, store) for call in calls]

    def summarize_for_memory(self, result: ToolResult) -> ToolResult:
        """Shrink a result before it is appended to conversation memory."""
        spec = self._tools.get(result.name)
        if spec is None or result.is_error:
            return result
        return ToolResult(
            call_id=result.call_id,
            name=result.name,
            payload=spec.summarize_for_memory(result.payload),
        )

    def _invoke(self, call: ToolCall, store: ExpenseStore) -> Payload:
        spec = self._tools.get(call.name)
        if spec is None:
            logger.warning("Unknown tool requested by model: %s", call.name)
            raise UnknownToolError(call.name)

        try:
            validated = spec.input_model.model_validate(call.arguments or {})
        except ValidationError as exc:
            logger.warning("Tool %s rejected arguments %s", call.name, call.arguments)
            raise ToolInputError(
                f"Invalid input for {call.name}: {_format_validation_error(exc)}"
            ) from exc

        try:
            logger.info("Executing tool=%s args=%s", call.name, dict(call.arguments or {}))
            with timeit(f"Tool {call.name}", logger=logger, unit="expenses", total=len(store)):
                return spec.handler(store, validated)
        except Exception as exc:
            logger.error("Tool %s failed: %s", call.name, exc, exc_info=True)
            raise ToolExecutionError(f"Tool {call.name} failed: {exc}") from exc


__all__ = [
    "ToolRegistry",
    "ToolSpec",
    "run_filter_tool",
    "summarize_filter_result",
]
