"""
Agent Configuration Module
Centralized configuration for LLM providers and the tool-calling loop
"""
import os

from pydantic import BaseModel, Field


class LLMProviderConfig(BaseModel):
    """Configuration for LLM providers"""

    # Claude Configuration
    claude_api_key: str = Field(
        default_factory=lambda: os.getenv("CLAUDE_API_KEY", "")
    )
    claude_model: str = "claude-haiku-4-5-20251001"
    claude_max_tokens: int = 2000

    # OpenAI Configuration
    openai_api_key: str = Field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY", "")
    )
    openai_model: str = "gpt-4o-mini"
    openai_max_tokens: int = 2000

    request_timeout: float = 60.0


class AgentConfig(BaseModel):
    """Tool-calling loop settings"""

    # Tool-call rounds allowed before giving up on a query
    max_steps: int = Field(default=3, ge=1)

    # Example expenses kept in memory from one filter_expenses result
    filter_result_limit: int = Field(default=25, ge=0)

    # Pause between rounds to stay under provider rate limits
    round_pause_seconds: float = Field(
        default_factory=lambda: float(os.getenv("AGENT_ROUND_PAUSE_SECONDS", "1.0")),
        ge=0,
    )

    max_steps_message: str = (
        "I'm sorry, I reached my maximum processing limit for this request."
    )


# Global config instances
llm_config = LLMProviderConfig()
agent_config = AgentConfig()
