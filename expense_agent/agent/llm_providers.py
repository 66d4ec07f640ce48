"""
LLM Provider Abstraction Layer
Tool-calling adapters for Anthropic Claude and OpenAI GPT models
"""
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional

import httpx

from expense_agent.core.log import get_logger

from .config import llm_config
from .errors import LLMProviderError
from .tools import ToolCall

logger = get_logger(__name__)

FinishReason = Literal["tool-calls", "stop"]


@dataclass
class GenerationResult:
    """Provider-neutral reply from the reasoning model."""

    finish_reason: FinishReason
    tool_calls: List[ToolCall] = field(default_factory=list)
    text: Optional[str] = None
    response_messages: List[Dict[str, Any]] = field(default_factory=list)
    model: Optional[str] = None
    provider: Optional[str] = None
    usage: Dict[str, Any] = field(default_factory=dict)

    @property
    def wants_tools(self) -> bool:
        return self.finish_reason == "tool-calls" and bool(self.tool_calls)


def assistant_message(text: Optional[str], tool_calls: List[ToolCall]) -> Dict[str, Any]:
    message: Dict[str, Any] = {"role": "assistant", "content": text or None}
    if tool_calls:
        message["tool_calls"] = [call.to_dict() for call in tool_calls]
    return message


def _result_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    return json.dumps(content, default=str)


class LLMProvider(ABC):
    """Base class for LLM providers"""

    name = "base"

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = llm_config.request_timeout
        self._transport = transport

    @abstractmethod
    async def generate(
        self,
        messages: List[Dict[str, Any]],
        tools: List[Dict[str, Any]],
    ) -> GenerationResult:
        """Send the conversation and tool declarations, return the next step"""
        raise NotImplementedError

    async def _post(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, headers=headers, json=payload)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPError as e:
            logger.error(f"{self.name} API error: {str(e)}")
            raise LLMProviderError(f"{self.name} API request failed: {str(e)}") from e
        except ValueError as e:
            logger.error(f"{self.name} API returned invalid JSON: {str(e)}")
            raise LLMProviderError(f"{self.name} API returned invalid JSON") from e


class ClaudeProvider(LLMProvider):
    """Anthropic Claude API provider"""

    name = "claude"
    endpoint = "https://api.anthropic.com/v1/messages"

    def __init__(
        self,
        model: Optional[str] = None,
        *,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            api_key=api_key or llm_config.claude_api_key,
            model=model or llm_config.claude_model,
            max_tokens=llm_config.claude_max_tokens,
            transport=transport,
        )

        if not self.api_key:
            raise ValueError("Claude API key not configured. Set CLAUDE_API_KEY environment variable.")

    @staticmethod
    def _build_messages(messages: List[Dict[str, Any]]) -> tuple[str, List[Dict[str, Any]]]:
        """Split out the system prompt and convert turns into content blocks."""
        system_parts: List[str] = []
        converted: List[Dict[str, Any]] = []

        for msg in messages:
            role = msg.get("role")
            if role == "system":
                system_parts.append(msg.get("content", ""))
            elif role == "user":
                text_block = {"type": "text", "text": msg.get("content", "")}
                previous = converted[-1] if converted else None
                if previous and previous["role"] == "user" and isinstance(previous["content"], list):
                    previous["content"].append(text_block)
                else:
                    converted.append({"role": "user", "content": [text_block]})
            elif role == "assistant":
                blocks: List[Dict[str, Any]] = []
                if msg.get("content"):
                    blocks.append({"type": "text", "text": msg["content"]})
                for call in msg.get("tool_calls") or []:
                    blocks.append({
                        "type": "tool_use",
                        "id": call["id"],
                        "name": call["name"],
                        "input": call.get("arguments") or {},
                    })
                # The Messages API rejects empty assistant turns
                if blocks:
                    converted.append({"role": "assistant", "content": blocks})
            elif role == "tool":
                content = msg.get("content")
                block = {
                    "type": "tool_result",
                    "tool_use_id": msg["tool_call_id"],
                    "content": _result_text(content),
                }
                if isinstance(content, dict) and "error" in content:
                    block["is_error"] = True
                # Consecutive results from one round share a single user turn
                previous = converted[-1] if converted else None
                if (
                    previous
                    and previous["role"] == "user"
                    and isinstance(previous["content"], list)
                    and all(b.get("type") == "tool_result" for b in previous["content"])
                ):
                    previous["content"].append(block)
                else:
                    converted.append({"role": "user", "content": [block]})

        return "\n\n".join(system_parts), converted

    async def generate(
        self,
        messages: List[Dict[str, Any]],
        tools: List[Dict[str, Any]],
    ) -> GenerationResult:
        """Query Claude API"""

        system_prompt, converted = self._build_messages(messages)
        payload: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": converted,
        }
        if system_prompt:
            payload["system"] = system_prompt
        if tools:
            payload["tools"] = [
                {
                    "name": tool["name"],
                    "description": tool["description"],
                    "input_schema": tool["input_schema"],
                }
                for tool in tools
            ]

        data = await self._post(
            self.endpoint,
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": "2023-06-01",
                "content-type": "application/json",
            },
            payload=payload,
        )

        texts: List[str] = []
        tool_calls: List[ToolCall] = []
        for block in data.get("content", []):
            if block.get("type") == "text":
                texts.append(block.get("text", ""))
            elif block.get("type") == "tool_use":
                tool_calls.append(
                    ToolCall(id=block["id"], name=block["name"], arguments=block.get("input") or {})
                )
        text = "\n".join(texts).strip()

        if data.get("stop_reason") == "tool_use" and tool_calls:
            return GenerationResult(
                finish_reason="tool-calls",
                tool_calls=tool_calls,
                text=text or None,
                response_messages=[assistant_message(text, tool_calls)],
                model=self.model,
                provider=self.name,
                usage=data.get("usage", {}),
            )

        return GenerationResult(
            finish_reason="stop",
            text=text,
            response_messages=[assistant_message(text, [])],
            model=self.model,
            provider=self.name,
            usage=data.get("usage", {}),
        )


class ChatGPTProvider(LLMProvider):
    """OpenAI GPT API provider"""

    name = "chatgpt"
    endpoint = "https://api.openai.com/v1/chat/completions"

    def __init__(
        self,
        model: Optional[str] = None,
        *,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            api_key=api_key or llm_config.openai_api_key,
            model=model or llm_config.openai_model,
            max_tokens=llm_config.openai_max_tokens,
            transport=transport,
        )

        if not self.api_key:
            raise ValueError("OpenAI API key not configured. Set OPENAI_API_KEY environment variable.")

    @staticmethod
    def _build_messages(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        converted: List[Dict[str, Any]] = []
        for msg in messages:
            role = msg.get("role")
            if role == "assistant" and msg.get("tool_calls"):
                converted.append({
                    "role": "assistant",
                    "content": msg.get("content"),
                    "tool_calls": [
                        {
                            "id": call["id"],
                            "type": "function",
                            "function": {
                                "name": call["name"],
                                "arguments": _result_text(call.get("arguments") or {}),
                            },
                        }
                        for call in msg["tool_calls"]
                    ],
                })
            elif role == "tool":
                converted.append({
                    "role": "tool",
                    "tool_call_id": msg["tool_call_id"],
                    "content": _result_text(msg.get("content")),
                })
            else:
                converted.append({"role": role, "content": msg.get("content", "")})
        return converted

    @staticmethod
    def _parse_arguments(raw: Any) -> Any:
        """Decode function arguments; undecodable text is passed on for validation to reject."""
        if not isinstance(raw, str):
            return raw or {}
        if not raw.strip():
            return {}
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Model returned non-JSON tool arguments: %s", raw)
            return raw

    async def generate(
        self,
        messages: List[Dict[str, Any]],
        tools: List[Dict[str, Any]],
    ) -> GenerationResult:
        """Query OpenAI Chat Completions with function tools"""

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": self._build_messages(messages),
            "max_tokens": self.max_tokens,
        }
        if tools:
            payload["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": tool["name"],
                        "description": tool["description"],
                        "parameters": tool["input_schema"],
                    },
                }
                for tool in tools
            ]

        data = await self._post(
            self.endpoint,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            payload=payload,
        )

        choice = (data.get("choices") or [{}])[0]
        message = choice.get("message", {})
        text = (message.get("content") or "").strip()
        tool_calls = [
            ToolCall(
                id=call.get("id", ""),
                name=call.get("function", {}).get("name", ""),
                arguments=self._parse_arguments(call.get("function", {}).get("arguments")),
            )
            for call in message.get("tool_calls") or []
        ]

        if tool_calls:
            return GenerationResult(
                finish_reason="tool-calls",
                tool_calls=tool_calls,
                text=text or None,
                response_messages=[assistant_message(text, tool_calls)],
                model=self.model,
                provider=self.name,
                usage=data.get("usage", {}),
            )

        return GenerationResult(
            finish_reason="stop",
            text=text,
            response_messages=[assistant_message(text, [])],
            model=self.model,
            provider=self.name,
            usage=data.get("usage", {}),
        )


class LLMProviderFactory:
    """Factory to create appropriate LLM provider"""

    FRIENDLY_ALIASES: Dict[str, tuple[str, Callable[[], Optional[str]]]] = {
        "claude-haiku-4.5": ("claude", lambda: llm_config.claude_model),
        "gpt-4o-mini": ("chatgpt", lambda: llm_config.openai_model),
    }

    LEGACY_NAMES = {
        "claude": "claude-haiku-4.5",
        "chatgpt": "gpt-4o-mini",
        "openai": "gpt-4o-mini",
    }

    @staticmethod
    def create(provider_name: str) -> LLMProvider:
        """
        Create LLM provider instance

        Args:
            provider_name: Supported model identifier or friendly alias

        Returns:
            Configured LLM provider instance
        """
        normalized = (provider_name or "").strip().lower()

        if normalized in LLMProviderFactory.LEGACY_NAMES:
            normalized = LLMProviderFactory.LEGACY_NAMES[normalized]

        alias_entry = LLMProviderFactory.FRIENDLY_ALIASES.get(normalized)
        if alias_entry:
            provider_key, resolver = alias_entry
            return LLMProviderFactory._build_provider(provider_key, resolver())

        if normalized == "":
            return ClaudeProvider()

        if normalized.startswith("claude"):
            return ClaudeProvider(model=provider_name.strip())
        if normalized.startswith("gpt"):
            return ChatGPTProvider(model=provider_name.strip())

        raise ValueError(f"Unknown LLM provider: {provider_name}")

    @staticmethod
    def _build_provider(provider_key: str, model_override: Optional[str]) -> LLMProvider:
        if provider_key == "claude":
            return ClaudeProvider(model=model_override)
        if provider_key == "chatgpt":
            return ChatGPTProvider(model=model_override)
        raise ValueError(f"Unsupported provider key: {provider_key}")
