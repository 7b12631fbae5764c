# =============================================================================
# Synthesizer — The Conductor's Final Call
# =============================================================================
#
# Merges the successful agent responses into one report with a single
# gateway call. The prompt, token ceiling and temperature come from a
# strategy table keyed by verbosity:
#
#   STANDARD — ~500-word decisive synthesis, confidence rating, one next action
#   EXTENDED — six-section strategic brief (1500-2000 words), confidence rating
#
# Both templates require the model to mark CONSENSUS and DISSENT, use the
# Futurist's long-term view and answer the Devil's Advocate's strongest
# challenge. Those are requirements on the generated text only.
#
# A failed synthesis returns "Synthesis error: ..." in place of the report.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from conductor.agents.invoker import AgentResult, AgentSuccess
from conductor.agents.registry import AGENTS, Verbosity, language_instruction
from conductor.config import settings
from conductor.exceptions import GatewayError
from conductor.services.llm import LLMProvider

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n\n---\n\n"


# ---------------------------------------------------------------------------
# Strategy Table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SynthesisStrategy:
    """Prompt template and sampling parameters for one verbosity mode."""

    system_template: str  # formatted with panel_size, language_instruction
    max_tokens: int
    temperature: float

    def system_prompt(self, language: str, panel_size: int) -> str:
        return self.system_template.format(
            panel_size=panel_size,
            language_instruction=language_instruction(language),
        )


_STANDARD_TEMPLATE = """\
You are the Conductor - the master synthesizer leading an elite team of AI agents.
Your task: create a definitive, actionable synthesis from {panel_size} expert perspectives.

{language_instruction}

Rules:
1. Synthesize - don't summarize. Create new insight from the combination.
2. Mark DISSENT clearly when agents fundamentally disagree
3. Highlight CONSENSUS on key points
4. Include the Futurist's long-term implications
5. Address the Devil's Advocate's strongest challenges
6. Be decisive - give clear conclusions, not hedged opinions
7. Maximum 500 words - every word must earn its place
8. End with "Confidence: X/10" and brief justification
9. If relevant, suggest ONE concrete next action"""

_EXTENDED_TEMPLATE = """\
You are the Conductor - a master strategic analyst synthesizing insights from {panel_size} expert perspectives.
Your task: Write a comprehensive Strategic Brief (4-5 pages, approximately 1500-2000 words).

{language_instruction}

Strategic Brief Structure:
1. EXECUTIVE SUMMARY (150-200 words): Key findings and recommendations at a glance
2. SITUATION ANALYSIS (300-400 words):
   - Current state and context
   - Key stakeholders and dynamics
   - Critical factors identified by experts
3. STRATEGIC ASSESSMENT (400-500 words):
   - CONSENSUS: Where experts agree
   - DISSENT: Where experts disagree and why it matters
   - Risk factors and opportunities, including the Devil's Advocate's strongest objection
4. LONG-TERM IMPLICATIONS (300-400 words):
   - 10-50 year horizon considerations, drawing on the Futurist
   - Civilizational perspective
   - Emerging trends and disruptions
5. RECOMMENDATIONS (200-300 words):
   - Priority actions (immediate, medium-term, long-term)
   - Resource requirements
   - Success metrics
6. CONCLUSION (100-150 words): Strategic synthesis and final assessment

Rules:
- Write in professional, authoritative prose
- Use clear section headings
- Be analytical and substantive
- Include specific examples and evidence
- Maintain strategic focus throughout
- End with Confidence rating (X/10) and brief justification"""

STRATEGIES: dict[Verbosity, SynthesisStrategy] = {
    Verbosity.STANDARD: SynthesisStrategy(
        system_template=_STANDARD_TEMPLATE,
        max_tokens=1200,
        temperature=0.5,
    ),
    Verbosity.EXTENDED: SynthesisStrategy(
        system_template=_EXTENDED_TEMPLATE,
        max_tokens=4000,
        temperature=0.6,
    ),
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def synthesize(
    question: str,
    agent_results: Sequence[AgentResult],
    language: str,
    verbosity: Verbosity,
    llm: LLMProvider,
    *,
    panel_size: int = len(AGENTS),
    timeout: float | None = None,
) -> str:
    """
    Produce the synthesized report from the agents' answers.

    Only AgentSuccess entries reach the prompt, in the order given.
    Zero successes still produce a call with an empty context block.

    Returns:
        The report text, or "Synthesis error: <message>" on any gateway
        failure or timeout.
    """
    if timeout is None:
        timeout = settings.synthesis_timeout_seconds

    strategy = STRATEGIES[verbosity]
    successes = [r for r in agent_results if isinstance(r, AgentSuccess)]
    context = format_agent_context(successes)

    logger.info(
        "Synthesizing: verbosity=%s, %d/%d agent responses",
        verbosity.value, len(successes), len(agent_results),
    )

    try:
        response = await asyncio.wait_for(
            llm.complete(
                messages=[{
                    "role": "user",
                    "content": (
                        f"Topic/Question: {question}\n\n"
                        f"Expert perspectives to synthesize:\n\n{context}"
                    ),
                }],
                system=strategy.system_prompt(language, panel_size),
                temperature=strategy.temperature,
                max_tokens=strategy.max_tokens,
                model=settings.synthesis_model,
            ),
            timeout=timeout,
        )
    except TimeoutError:
        logger.warning("Synthesis timed out after %.0fs", timeout)
        return f"Synthesis error: timed out after {timeout:g}s"
    except GatewayError as e:
        logger.warning("Synthesis failed: %s", e)
        return f"Synthesis error: {e}"

    return response.content


def format_agent_context(successes: Sequence[AgentSuccess]) -> str:
    """
    Format agent answers as the synthesis context block.

    Example output:
        **Architect** (Structures the problem, ...):
        The core issue is ...

        ---

        **Red Team** (Finds weaknesses, ...):
        The plan assumes ...
    """
    return CONTEXT_SEPARATOR.join(
        f"**{r.agent_name}** ({r.role}):\n{r.response}" for r in successes
    )
