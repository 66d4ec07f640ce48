"""Append-only conversation memory owned by a single agent."""
from __future__ import annotations

from typing import Any, Iterable, Iterator

from .tools import ToolResult

Message = dict[str, Any]

_ROLES = frozenset({"system", "user", "assistant", "tool"})


class ConversationMemory:
    """
    Ordered message records in a provider-neutral shape.

    ``{"role": "system" | "user", "content": str}``
    ``{"role": "assistant", "content": str | None, "tool_calls": [{"id", "name", "arguments"}]}``
    ``{"role": "tool", "tool_call_id": str, "name": str, "content": dict}``
    """

    def __init__(self, system_prompt: str | None = None) -> None:
        self._messages: list[Message] = []
        if system_prompt is not None:
            self.add_system(system_prompt)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.snapshot())

    def snapshot(self) -> list[Message]:
        """Copy of the messages, safe to hand to a provider."""
        return [dict(message) for message in self._messages]

    def add_system(self, content: str) -> None:
        self._append({"role": "system", "content": content})

    def add_user(self, content: str) -> None:
        self._append({"role": "user", "content": content})

    def add_assistant(self, content: str) -> None:
        self._append({"role": "assistant", "content": content})

    def add_tool_result(self, result: ToolResult) -> None:
        self._append(result.to_message())

    def extend(self, messages: Iterable[Message]) -> None:
        for message in messages:
            self._append(dict(message))

    def _append(self, message: Message) -> None:
        if message.get("role") not in _ROLES:
            raise ValueError(f"Unsupported message role: {message.get('role')!r}")
        self._messages.append(message)


__all__ = ["ConversationMemory", "Message"]
