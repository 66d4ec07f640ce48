"""Exceptions raised inside the agent package."""
from __future__ import annotations


class ToolError(Exception):
    """Base class for failures that are reported back to the model as tool results."""


class UnknownToolError(ToolError):
    """The model asked for a tool that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ToolInputError(ToolError):
    """Tool arguments do not match the declared input shape."""


class ToolExecutionError(ToolError):
    """The analytics function raised while running a validated call."""


class LLMProviderError(Exception):
    """The reasoning model could not be reached or returned an unusable reply."""


class AgentBusyError(RuntimeError):
    """A second ``run`` was started while the agent was still answering."""


__all__ = [
    "AgentBusyError",
    "LLMProviderError",
    "ToolError",
    "ToolExecutionError",
    "ToolInputError",
    "UnknownToolError",
]
