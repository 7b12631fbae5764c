# =============================================================================
# Fan-Out Coordinator — All Agents, One Round, In Parallel
# =============================================================================
#
# Starts one invocation per registered agent before awaiting any of them,
# then joins on all of them. Total latency ≈ the slowest agent, bounded by
# two limits:
#   - agent_timeout: per-call ceiling (asyncio.wait_for)
#   - session_deadline: ceiling for the whole round (asyncio.wait); calls
#     still running when it passes are cancelled
#
# INVARIANTS:
#   - exactly one AgentResult per agent, in registry order, whatever the
#     completion order
#   - a failing, timed-out or crashing agent never aborts the others; it
#     occupies its slot as an AgentFailure
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence

from conductor.agents.invoker import AgentFailure, AgentResult, invoke_agent
from conductor.agents.registry import AGENTS, AgentDefinition, Verbosity
from conductor.config import settings
from conductor.services.llm import LLMProvider

logger = logging.getLogger(__name__)


async def run_all(
    question: str,
    language: str,
    verbosity: Verbosity,
    llm: LLMProvider,
    agents: Sequence[AgentDefinition] = AGENTS,
    *,
    peer_context: str = "",
    agent_timeout: float | None = None,
    session_deadline: float | None = None,
) -> list[AgentResult]:
    """
    Invoke every agent concurrently and collect results in registry order.

    Args:
        question: Full question text sent to every agent.
        language: Resolved language code.
        verbosity: Report verbosity mode.
        llm: Gateway provider shared by all calls.
        agents: Panel to invoke (defaults to the registry).
        peer_context: Shared context block; empty for an independent round.
        agent_timeout: Per-call timeout in seconds (config default).
        session_deadline: Whole-round deadline in seconds (config default).

    Returns:
        One AgentResult per agent, same order as `agents`.
    """
    if agent_timeout is None:
        agent_timeout = settings.agent_timeout_seconds
    if session_deadline is None:
        session_deadline = settings.session_deadline_seconds

    if not agents:
        return []

    start = time.monotonic()
    tasks = [
        asyncio.create_task(
            _invoke_bounded(
                agent, question, language, peer_context, verbosity, llm,
                agent_timeout,
            ),
            name=f"agent:{agent.id}",
        )
        for agent in agents
    ]

    try:
        _, pending = await asyncio.wait(tasks, timeout=session_deadline)
    finally:
        # Also reached when the caller is cancelled mid-round
        for task in tasks:
            if not task.done():
                task.cancel()

    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(
            "Session deadline (%.0fs) hit: %d agent(s) cancelled",
            session_deadline, len(pending),
        )

    results: list[AgentResult] = []
    for agent, task in zip(agents, tasks, strict=True):
        if task in pending:
            results.append(AgentFailure(
                agent_name=agent.display_name,
                error=f"Session deadline of {session_deadline:g}s exceeded",
            ))
        else:
            results.append(task.result())

    failures = sum(1 for r in results if isinstance(r, AgentFailure))
    logger.info(
        "Fan-out complete: %d agents, %d failed, %.1fs",
        len(results), failures, time.monotonic() - start,
    )
    return results


async def _invoke_bounded(
    agent: AgentDefinition,
    question: str,
    language: str,
    peer_context: str,
    verbosity: Verbosity,
    llm: LLMProvider,
    timeout: float,
) -> AgentResult:
    """invoke_agent() with a timeout; anything unexpected becomes a failure."""
    try:
        return await asyncio.wait_for(
            invoke_agent(agent, question, language, peer_context, verbosity, llm),
            timeout=timeout,
        )
    except TimeoutError:
        logger.warning("Agent %s timed out after %.0fs", agent.display_name, timeout)
        return AgentFailure(
            agent_name=agent.display_name,
            error=f"Timed out after {timeout:g}s",
        )
    except Exception as e:
        logger.exception("Agent %s crashed: %s", agent.display_name, e)
        return AgentFailure(agent_name=agent.display_name, error=str(e))
