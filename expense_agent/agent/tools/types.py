"""Typed helpers shared across the agent tool registry."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the reasoning model."""

    id: str
    name: str
    # Mapping normally; raw text when the model sent arguments that are not JSON
    arguments: Mapping[str, Any] | str = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        arguments = (
            dict(self.arguments) if isinstance(self.arguments, Mapping) else self.arguments
        )
        return {"id": self.id, "name": self.name, "arguments": arguments}


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool call, correlated to the request by ``call_id``."""

    call_id: str
    name: str
    payload: dict[str, Any]

    @property
    def is_error(self) -> bool:
        return "error" in self.payload

    @classmethod
    def failure(cls, call: ToolCall, message: str) -> "ToolResult":
        return cls(call_id=call.id, name=call.name, payload={"error": message})

    def to_message(self) -> dict[str, Any]:
        """Conversation memory record for this result."""
        return {
            "role": "tool",
            "tool_call_id": self.call_id,
            "name": self.name,
            "content": self.payload,
        }


__all__ = ["ToolCall", "ToolResult"]
