# =============================================================================
# Agent Invoker — One Panel Seat, One Gateway Call
# =============================================================================
#
# Builds a system/user message pair for one agent, calls the gateway with
# the agent's model, and normalises the outcome into an AgentResult.
#
# AgentResult is a tagged union:
#   AgentSuccess — agent_name, role, model, response
#   AgentFailure — agent_name, error
#
# DESIGN DECISION: Failures are values, not exceptions.
# A gateway error or transport failure for one agent is an expected outcome
# of a fan-out. invoke_agent() returns AgentFailure for both and never
# raises them, so the coordinator can carry on with the other seats.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from conductor.agents.registry import AgentDefinition, Verbosity, language_instruction
from conductor.config import settings
from conductor.exceptions import GatewayError
from conductor.services.llm import LLMProvider

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AgentSuccess:
    """An agent answered."""

    agent_name: str
    role: str
    model: str
    response: str


@dataclass(frozen=True)
class AgentFailure:
    """An agent's call failed; `error` is the reported message."""

    agent_name: str
    error: str


AgentResult = Union[AgentSuccess, AgentFailure]


# ---------------------------------------------------------------------------
# Per-Verbosity Limits
# ---------------------------------------------------------------------------

MAX_WORDS: dict[Verbosity, int] = {
    Verbosity.STANDARD: 250,
    Verbosity.EXTENDED: 400,
}

MAX_TOKENS: dict[Verbosity, int] = {
    Verbosity.STANDARD: 600,
    Verbosity.EXTENDED: 800,
}


# ---------------------------------------------------------------------------
# Prompt Builders
# ---------------------------------------------------------------------------


def build_system_prompt(
    agent: AgentDefinition,
    language: str,
    verbosity: Verbosity,
) -> str:
    """System instruction for one agent: identity, role, language, length."""
    return (
        f"You are {agent.display_name} - an elite expert in your domain.\n"
        f"Your role: {agent.role_for(language)}.\n"
        f"{language_instruction(language)}\n"
        f"Respond with substance and depth (max {MAX_WORDS[verbosity]} words).\n"
        "Focus only on your specific role - provide unique value that other "
        "agents cannot. Do not repeat what other agents would say.\n"
        "No fluff, no generic statements. Every sentence must add insight."
    )


def build_user_message(question: str, peer_context: str = "") -> str:
    """The bare question, or the question plus other agents' responses."""
    if not peer_context:
        return question
    return f"Question: {question}\n\nOther agents' responses:\n{peer_context}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def invoke_agent(
    agent: AgentDefinition,
    question: str,
    language: str,
    peer_context: str,
    verbosity: Verbosity,
    llm: LLMProvider,
) -> AgentResult:
    """
    Ask one agent the question.

    Args:
        agent: The panel seat to invoke.
        question: Full question text (document content already appended).
        language: Resolved language code.
        peer_context: Other agents' responses, or "" for an independent round.
        verbosity: Selects the word and token ceilings.
        llm: Gateway provider.

    Returns:
        AgentSuccess on a completion, AgentFailure on any gateway error.
    """
    try:
        response = await llm.complete(
            messages=[{
                "role": "user",
                "content": build_user_message(question, peer_context),
            }],
            system=build_system_prompt(agent, language, verbosity),
            temperature=settings.agent_temperature,
            max_tokens=MAX_TOKENS[verbosity],
            model=agent.model_id,
        )
    except GatewayError as e:
        logger.warning("Agent %s failed: %s", agent.display_name, e)
        return AgentFailure(agent_name=agent.display_name, error=str(e))

    logger.info(
        "Agent %s answered: model=%s, tokens=%d+%d",
        agent.display_name, response.model,
        response.input_tokens, response.output_tokens,
    )

    return AgentSuccess(
        agent_name=agent.display_name,
        role=agent.role_for(language),
        model=agent.model_id,
        response=response.content,
    )
