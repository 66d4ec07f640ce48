"""
FastAPI Router for the expense agent
One FinanceAgent per session so follow-up questions share memory
"""
from collections import OrderedDict
from datetime import date
from typing import Callable, Optional
from uuid import uuid4

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from expense_agent.core.log import get_logger
from expense_agent.schemas import ExpenseStore

from .agent_core import FinanceAgent
from .config import AgentConfig
from .errors import AgentBusyError, LLMProviderError
from .llm_providers import LLMProvider, LLMProviderFactory

logger = get_logger(__name__)

# Create router
router = APIRouter(prefix="/agent", tags=["Expense Agent"])


class AgentQueryRequest(BaseModel):
    """Request model for an agent query"""
    question: str = Field(min_length=1)
    session_id: Optional[str] = None
    model: Optional[str] = None


class AgentQueryResponse(BaseModel):
    """Response model for an agent query"""
    answer: str
    session_id: str


# Dependency placeholders (configured by the application factory)
_store: Optional[ExpenseStore] = None
_provider_factory: Callable[[str], LLMProvider] = LLMProviderFactory.create
_default_model: str = ""
_agent_config: Optional[AgentConfig] = None
_today: Optional[date] = None
_max_sessions: int = 100
# Least recently used first
_sessions: "OrderedDict[str, FinanceAgent]" = OrderedDict()


def configure_dependencies(
    store: ExpenseStore,
    *,
    default_model: str = "",
    provider_factory: Optional[Callable[[str], LLMProvider]] = None,
    agent_config: Optional[AgentConfig] = None,
    today: Optional[date] = None,
    max_sessions: int = 100,
) -> None:
    """
    Configure dependencies for the agent router

    Args:
        store: Expenses every session analyses
        default_model: Provider/model name used when a request names none
        provider_factory: Builds a provider from a model name
        agent_config: Loop settings shared by all sessions
        today: Fixed "today" for system prompts, defaults to the real date
        max_sessions: Sessions kept before the least recently used one is dropped
    """
    global _store, _provider_factory, _default_model, _agent_config, _today, _max_sessions

    _store = store
    _provider_factory = provider_factory or LLMProviderFactory.create
    _default_model = default_model
    _agent_config = agent_config
    _today = today
    _max_sessions = max_sessions
    _sessions.clear()


def get_store() -> ExpenseStore:
    if _store is None:
        raise RuntimeError("Expense store not configured. Call configure_dependencies() first.")
    return _store


def _get_or_create_agent(session_id: Optional[str], model: Optional[str]) -> tuple[str, FinanceAgent]:
    if session_id and session_id in _sessions:
        _sessions.move_to_end(session_id)
        return session_id, _sessions[session_id]

    store = get_store()
    provider = _provider_factory(model or _default_model)
    agent = FinanceAgent(store, provider, config=_agent_config, today=_today)
    session_id = session_id or uuid4().hex
    _sessions[session_id] = agent
    while len(_sessions) > _max_sessions:
        evicted, _ = _sessions.popitem(last=False)
        logger.info("Dropped least recently used agent session %s", evicted)
    logger.info("Started agent session %s with provider %s", session_id, provider.name)
    return session_id, agent


# Routes
@router.post("/query", response_model=AgentQueryResponse)
async def agent_query(payload: AgentQueryRequest):
    """
    Answer a question about the configured expenses

    Request body:
    - question: Natural language question
    - session_id: Optional id returned by a previous call, to ask follow-ups
    - model: Optional provider/model name for a new session
    """
    try:
        session_id, agent = _get_or_create_agent(payload.session_id, payload.model)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        answer = await agent.run(payload.question)
    except AgentBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except LLMProviderError as e:
        logger.error(f"Agent query failed: {str(e)}")
        raise HTTPException(status_code=502, detail=str(e))

    return AgentQueryResponse(answer=answer, session_id=session_id)


@router.delete("/sessions/{session_id}", status_code=204)
async def end_session(session_id: str):
    """Forget a session's conversation memory"""
    if _sessions.pop(session_id, None) is None:
        raise HTTPException(status_code=404, detail="Unknown session")


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "store_configured": _store is not None,
        "expenses": len(_store) if _store is not None else 0,
        "sessions": len(_sessions),
    }
