# =============================================================================
# LangGraph Orchestrator — One Question, One Fan-Out, One Synthesis
# =============================================================================
#
# A session moves through four stages with no retries and no way back:
#
#   received ──▶ fanning_out ──▶ synthesizing ──▶ completed
#
# `received` is the validation done by ask() before the graph runs: a
# non-empty question and a configured gateway credential. Either failure
# raises a ConfigurationError before any gateway call is made.
#
# GRAPH TOPOLOGY:
#   START ──▶ fan_out ──▶ synthesize ──▶ END
#
# DESIGN DECISION: Plain TypedDict state.
# The state is structured data flowing through a pipeline:
# question → agent results → synthesis. No chat history.
#
# DESIGN DECISION: Graph compiled once at module level and reused by every
# concurrent request. Each invocation gets its own state; nothing crosses
# sessions except the read-only registry.
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from conductor.agents.fan_out import run_all
from conductor.agents.invoker import AgentResult
from conductor.agents.registry import (
    AGENTS,
    AgentDefinition,
    Verbosity,
    resolve_language,
)
from conductor.agents.synthesizer import synthesize
from conductor.config import settings
from conductor.exceptions import InvalidRequestError
from conductor.services.llm import LLMProvider, get_llm_provider

logger = logging.getLogger(__name__)

DOCUMENT_DELIMITER = "\n\n---\nDOCUMENT CONTENT:\n"


# ---------------------------------------------------------------------------
# Session State Schema
# ---------------------------------------------------------------------------


class SessionState(TypedDict, total=False):
    """State that flows through the LangGraph graph."""

    # --- Input (set by ask()) ---
    question: str            # Full question: user text + attached document
    language: str
    verbosity: Verbosity
    agents: Sequence[AgentDefinition]
    # NOTE: Not JSON-serialisable. Safe while no checkpointer is configured.
    llm: LLMProvider

    # --- Set by nodes ---
    stage: str
    agent_results: list[AgentResult]
    synthesis: str


@dataclass(frozen=True)
class OrchestrationResult:
    """Terminal artifact of one session, handed back to the caller."""

    question: str
    language: str
    verbosity: Verbosity
    timestamp: datetime
    agent_results: list[AgentResult]
    synthesis: str


# ---------------------------------------------------------------------------
# Node Functions
# ---------------------------------------------------------------------------


async def fan_out_node(state: SessionState) -> dict:
    """Invoke every agent in parallel; results come back in registry order."""
    results = await run_all(
        question=state["question"],
        language=state["language"],
        verbosity=state["verbosity"],
        llm=state["llm"],
        agents=state["agents"],
    )
    return {"stage": "synthesizing", "agent_results": results}


async def synthesize_node(state: SessionState) -> dict:
    """Merge the agent results into one report."""
    synthesis = await synthesize(
        question=state["question"],
        agent_results=state["agent_results"],
        language=state["language"],
        verbosity=state["verbosity"],
        llm=state["llm"],
        panel_size=len(state["agents"]),
    )
    return {"stage": "completed", "synthesis": synthesis}


# ---------------------------------------------------------------------------
# Graph Assembly
# ---------------------------------------------------------------------------

_builder = StateGraph(SessionState)
_builder.add_node("fan_out", fan_out_node)
_builder.add_node("synthesize", synthesize_node)

_builder.add_edge(START, "fan_out")
_builder.add_edge("fan_out", "synthesize")
_builder.add_edge("synthesize", END)

graph = _builder.compile()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_full_question(
    question: str,
    document_text: str | None,
    max_chars: int | None = None,
) -> str:
    """Append attached document text, truncated to `max_chars`, to a question."""
    if not document_text:
        return question
    if max_chars is None:
        max_chars = settings.max_document_chars
    return f"{question}{DOCUMENT_DELIMITER}{document_text[:max_chars]}"


async def ask(
    question: str | None,
    language: str | None = None,
    verbosity: Verbosity = Verbosity.STANDARD,
    document_text: str | None = None,
    llm: LLMProvider | None = None,
    agents: Sequence[AgentDefinition] = AGENTS,
) -> OrchestrationResult:
    """
    Run one orchestration session.

    Args:
        question: The user's question.
        language: Requested language code; unknown codes use the default.
        verbosity: Standard synthesis or extended strategic brief.
        document_text: Optional extracted document text to attach.
        llm: Optional gateway override. Defaults to the process singleton.
        agents: Panel to consult. Defaults to the registry.

    Returns:
        OrchestrationResult with one agent result per agent and a synthesis.

    Raises:
        InvalidRequestError: The question is missing or blank.
        MissingCredentialError: No gateway credential is configured.
    """
    # --- Stage: received ---
    if not question or not question.strip():
        raise InvalidRequestError("Question missing")
    if llm is None:
        llm = get_llm_provider()

    resolved_language = resolve_language(language)
    initial_state: SessionState = {
        "question": build_full_question(question, document_text),
        "language": resolved_language,
        "verbosity": verbosity,
        "agents": agents,
        "llm": llm,
        "stage": "fanning_out",
    }

    logger.info(
        "Session started: question='%s', lang=%s, verbosity=%s, document=%s",
        question[:80], resolved_language, verbosity.value,
        "yes" if document_text else "no",
    )

    final = await graph.ainvoke(initial_state)

    logger.info("Session %s", final.get("stage"))

    return OrchestrationResult(
        question=question,
        language=resolved_language,
        verbosity=verbosity,
        timestamp=datetime.now(UTC),
        agent_results=final["agent_results"],
        synthesis=final["synthesis"],
    )
