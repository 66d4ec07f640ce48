"""Tool-calling expense agent: analytics tools, registry, providers and loop."""
from .agent_core import FinanceAgent
from .config import AgentConfig, LLMProviderConfig, agent_config, llm_config
from .errors import (
    AgentBusyError,
    LLMProviderError,
    ToolError,
    ToolExecutionError,
    ToolInputError,
    UnknownToolError,
)
from .llm_providers import (
    ChatGPTProvider,
    ClaudeProvider,
    GenerationResult,
    LLMProvider,
    LLMProviderFactory,
)
from .memory import ConversationMemory
from .registry import ToolRegistry, ToolSpec
from .router import configure_dependencies, router

__all__ = [
    "AgentBusyError",
    "AgentConfig",
    "ChatGPTProvider",
    "ClaudeProvider",
    "ConversationMemory",
    "FinanceAgent",
    "GenerationResult",
    "LLMProvider",
    "LLMProviderConfig",
    "LLMProviderError",
    "LLMProviderFactory",
    "ToolError",
    "ToolExecutionError",
    "ToolInputError",
    "ToolRegistry",
    "ToolSpec",
    "UnknownToolError",
    "agent_config",
    "configure_dependencies",
    "llm_config",
    "router",
]
