"""
Core Agent Orchestration Module
Bounded tool-calling loop between conversation memory and the analytics tools
"""
import asyncio
from datetime import date
from typing import Optional
from uuid import uuid4

from expense_agent.core.log import get_logger, log_context, timeit
from expense_agent.schemas import ExpenseStore

from .config import AgentConfig, agent_config
from .errors import AgentBusyError
from .llm_providers import GenerationResult, LLMProvider, assistant_message
from .memory import ConversationMemory
from .prompt_builder import PromptBuilder
from .registry import ToolRegistry

logger = get_logger(__name__)


class FinanceAgent:
    """Answers questions about one expense store by calling analytics tools"""

    def __init__(
        self,
        store: ExpenseStore,
        provider: LLMProvider,
        *,
        config: Optional[AgentConfig] = None,
        registry: Optional[ToolRegistry] = None,
        system_prompt: Optional[str] = None,
        today: Optional[date] = None,
    ):
        """
        Initialize the agent

        Args:
            store: Expenses the tools read from; never modified
            provider: Reasoning model adapter
            config: Loop settings (step budget, truncation limit, pause)
            registry: Tool registry, built from ``config`` when omitted
            system_prompt: Override for the generated system prompt
            today: Date the system prompt treats as "today"
        """
        self.store = store
        self.provider = provider
        self.config = config or agent_config
        self.registry = registry or ToolRegistry(
            filter_result_limit=self.config.filter_result_limit
        )
        if system_prompt is None:
            system_prompt = PromptBuilder(
                self.registry.describe_for_prompt()
            ).build_system_prompt(today)
        self.memory = ConversationMemory(system_prompt)
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def run(self, query: str) -> str:
        """
        Answer one user turn

        Returns the model's final answer, or the fixed step-budget message when
        the model keeps requesting tools after ``max_steps`` rounds.
        """
        if self._running:
            raise AgentBusyError("Agent is already answering a query")

        self._running = True
        log_context.bind(run=uuid4().hex[:8])
        try:
            with timeit("Agent run", logger=logger, unit="tool rounds") as timer:
                return await self._run_rounds(query, timer)
        finally:
            log_context.unbind("run")
            self._running = False

    async def _run_rounds(self, query: str, timer) -> str:
        self.memory.add_user(query)
        declarations = self.registry.declarations()
        steps = 0

        while steps < self.config.max_steps:
            result = await self.provider.generate(self.memory.snapshot(), declarations)
            logger.info(
                "Model replied finish_reason=%s tool_calls=%s",
                result.finish_reason,
                [call.name for call in result.tool_calls],
            )

            if not result.wants_tools:
                answer = result.text or ""
                self.memory.add_assistant(answer)
                return answer

            self._apply_tool_round(result)
            steps += 1
            timer.add()

            if steps < self.config.max_steps:
                await asyncio.sleep(self.config.round_pause_seconds)

        logger.warning("Step budget of %d rounds exhausted", self.config.max_steps)
        return self.config.max_steps_message

    def _apply_tool_round(self, result: GenerationResult) -> None:
        """Record the model's tool requests, then each result in request order."""
        self.memory.extend(
            result.response_messages
            or [assistant_message(result.text, result.tool_calls)]
        )
        for tool_result in self.registry.execute_calls(result.tool_calls, self.store):
            if tool_result.is_error:
                logger.warning("Tool %s returned error: %s", tool_result.name, tool_result.payload["error"])
            self.memory.add_tool_result(self.registry.summarize_for_memory(tool_result))
