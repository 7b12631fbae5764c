# =============================================================================
# Unit Tests — Fan-Out Coordinator & Orchestration Session
# =============================================================================
#
# Runs whole sessions against a mock gateway whose behaviour is keyed by
# model id, so each panel seat can succeed, fail, stall or crash on its own.
# =============================================================================

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from conductor.agents import orchestrator
from conductor.agents.fan_out import run_all
from conductor.agents.invoker import AgentFailure, AgentSuccess
from conductor.agents.orchestrator import (
    DOCUMENT_DELIMITER,
    ask,
    build_full_question,
)
from conductor.agents.registry import AGENTS, AgentDefinition, Verbosity
from conductor.config import settings
from conductor.exceptions import (
    GatewayError,
    InvalidRequestError,
    MissingCredentialError,
)
from conductor.services import llm as llm_module
from conductor.services.llm import LLMResponse


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _panel(*model_ids: str) -> list[AgentDefinition]:
    """A small panel, one agent per model id, named after the model."""
    return [
        AgentDefinition(
            id=model_id.split("/")[-1],
            display_name=model_id.split("/")[-1].upper(),
            roles={"en": f"role {i}"},
            model_id=model_id,
        )
        for i, model_id in enumerate(model_ids)
    ]


def _gateway(behaviour: dict[str, object]) -> AsyncMock:
    """
    Mock gateway. `behaviour` maps model id to one of:
      - str: returned as the completion
      - Exception: raised
      - (delay, str): sleep `delay` seconds, then return the text
    Unknown models (e.g. the synthesis model) answer "SYNTHESIS".
    """
    async def complete(**kwargs):
        outcome = behaviour.get(kwargs["model"], "SYNTHESIS")
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, tuple):
            delay, outcome = outcome
            await asyncio.sleep(delay)
        return LLMResponse(
            content=outcome, model=kwargs["model"],
            input_tokens=1, output_tokens=1,
        )

    mock_llm = AsyncMock()
    mock_llm.complete.side_effect = complete
    return mock_llm


def _agent_calls(mock_llm: AsyncMock) -> list[dict]:
    return [
        c.kwargs for c in mock_llm.complete.call_args_list
        if c.kwargs["model"] != settings.synthesis_model
    ]


# ---------------------------------------------------------------------------
# Test: Fan-Out Coordinator
# ---------------------------------------------------------------------------


class TestRunAll:
    """Tests for run_all(): ordering, isolation and time limits."""

    def test_results_in_registry_order_despite_completion_order(self):
        agents = _panel("p/slow", "p/fast", "p/medium")
        mock_llm = _gateway({
            "p/slow": (0.15, "slow answer"),
            "p/fast": (0.0, "fast answer"),
            "p/medium": (0.05, "medium answer"),
        })

        results = _run(run_all("Q", "en", Verbosity.STANDARD, mock_llm, agents))

        assert [r.agent_name for r in results] == ["SLOW", "FAST", "MEDIUM"]
        assert [r.response for r in results] == [
            "slow answer", "fast answer", "medium answer",
        ]

    def test_calls_run_concurrently(self):
        agents = _panel("p/a", "p/b", "p/c", "p/d")
        mock_llm = _gateway({a.model_id: (0.2, "ok") for a in agents})

        async def timed():
            loop = asyncio.get_running_loop()
            start = loop.time()
            await run_all("Q", "en", Verbosity.STANDARD, mock_llm, agents)
            return loop.time() - start

        # Four 0.2s calls in sequence would take 0.8s
        assert _run(timed()) < 0.6

    def test_failure_is_isolated(self):
        agents = _panel("p/a", "p/b", "p/c")
        mock_llm = _gateway({
            "p/a": "A",
            "p/b": GatewayError("rate limited"),
            "p/c": "C",
        })

        results = _run(run_all("Q", "en", Verbosity.STANDARD, mock_llm, agents))

        assert isinstance(results[0], AgentSuccess)
        assert results[1] == AgentFailure(agent_name="B", error="rate limited")
        assert isinstance(results[2], AgentSuccess)

    def test_every_agent_called_once(self):
        mock_llm = _gateway({})

        results = _run(run_all("Q", "en", Verbosity.STANDARD, mock_llm))

        assert len(results) == len(AGENTS)
        assert mock_llm.complete.call_count == len(AGENTS)

    def test_unexpected_exception_becomes_failure(self):
        agents = _panel("p/a", "p/b")
        mock_llm = _gateway({"p/a": RuntimeError("boom"), "p/b": "B"})

        results = _run(run_all("Q", "en", Verbosity.STANDARD, mock_llm, agents))

        assert results[0] == AgentFailure(agent_name="A", error="boom")
        assert results[1].response == "B"

    def test_per_agent_timeout(self):
        agents = _panel("p/stuck", "p/ok")
        mock_llm = _gateway({"p/stuck": (5.0, "late"), "p/ok": "on time"})

        results = _run(run_all(
            "Q", "en", Verbosity.STANDARD, mock_llm, agents,
            agent_timeout=0.05, session_deadline=2.0,
        ))

        assert results[0] == AgentFailure(
            agent_name="STUCK", error="Timed out after 0.05s",
        )
        assert results[1].response == "on time"

    def test_session_deadline_cancels_unfinished_calls(self):
        agents = _panel("p/stuck", "p/ok")
        mock_llm = _gateway({"p/stuck": (5.0, "late"), "p/ok": "on time"})

        results = _run(run_all(
            "Q", "en", Verbosity.STANDARD, mock_llm, agents,
            agent_timeout=10.0, session_deadline=0.05,
        ))

        assert results[0] == AgentFailure(
            agent_name="STUCK", error="Session deadline of 0.05s exceeded",
        )
        assert results[1].response == "on time"

    def test_empty_panel(self):
        mock_llm = _gateway({})
        assert _run(run_all("Q", "en", Verbosity.STANDARD, mock_llm, [])) == []
        mock_llm.complete.assert_not_called()

    def test_peer_context_reaches_every_agent(self):
        agents = _panel("p/a", "p/b")
        mock_llm = _gateway({})

        _run(run_all(
            "Q", "en", Verbosity.STANDARD, mock_llm, agents,
            peer_context="A said yes",
        ))

        for call in mock_llm.complete.call_args_list:
            content = call.kwargs["messages"][0]["content"]
            assert "Other agents' responses:\nA said yes" in content

    def test_same_behaviour_same_pattern(self):
        agents = _panel("p/a", "p/b", "p/c")
        behaviour = {"p/a": "A", "p/b": GatewayError("down"), "p/c": "C"}

        def pattern():
            results = _run(run_all(
                "Q", "en", Verbosity.STANDARD, _gateway(behaviour), agents,
            ))
            return [type(r).__name__ for r in results]

        assert pattern() == pattern() == [
            "AgentSuccess", "AgentFailure", "AgentSuccess",
        ]


# ---------------------------------------------------------------------------
# Test: Document Attachment
# ---------------------------------------------------------------------------


class TestBuildFullQuestion:
    """Tests for attaching extracted document text to a question."""

    def test_no_document(self):
        assert build_full_question("Q", None) == "Q"
        assert build_full_question("Q", "") == "Q"

    def test_document_truncated_to_limit(self):
        full = build_full_question("Q", "x" * 20000)
        assert full == "Q" + DOCUMENT_DELIMITER + "x" * settings.max_document_chars

    def test_short_document_kept_whole(self):
        assert build_full_question("Q", "abc") == "Q" + DOCUMENT_DELIMITER + "abc"

    def test_custom_limit(self):
        assert build_full_question("Q", "abcdef", max_chars=3).endswith("abc")


# ---------------------------------------------------------------------------
# Test: Orchestration Session
# ---------------------------------------------------------------------------


class TestAsk:
    """End-to-end ask() sessions with a mock gateway."""

    def test_partial_failure_session(self):
        agents = _panel("p/a", "p/b", "p/c")
        mock_llm = _gateway({
            "p/a": "Answer A",
            "p/b": "Answer B",
            "p/c": GatewayError("rate limited"),
        })

        result = _run(ask(
            "Should we adopt policy P?", "en", llm=mock_llm, agents=agents,
        ))

        assert result.question == "Should we adopt policy P?"
        assert result.language == "en"
        assert result.verbosity is Verbosity.STANDARD
        assert [type(r) for r in result.agent_results] == [
            AgentSuccess, AgentSuccess, AgentFailure,
        ]
        assert result.agent_results[2].error == "rate limited"
        assert result.synthesis == "SYNTHESIS"

        synthesis_call = mock_llm.complete.call_args_list[-1].kwargs
        assert synthesis_call["model"] == settings.synthesis_model
        content = synthesis_call["messages"][0]["content"]
        assert "**A**" in content
        assert "**B**" in content
        assert "**C**" not in content
        assert "3 expert perspectives" in synthesis_call["system"]

    def test_all_agents_fail_still_synthesizes(self):
        agents = _panel("p/a", "p/b")
        mock_llm = _gateway({
            "p/a": GatewayError("down"),
            "p/b": GatewayError("down"),
        })

        result = _run(ask("Q", llm=mock_llm, agents=agents))

        assert all(isinstance(r, AgentFailure) for r in result.agent_results)
        assert result.synthesis == "SYNTHESIS"

    def test_synthesis_failure_is_inline(self):
        agents = _panel("p/a")
        mock_llm = _gateway({
            "p/a": "A",
            settings.synthesis_model: GatewayError("overloaded"),
        })

        result = _run(ask("Q", llm=mock_llm, agents=agents))

        assert result.synthesis == "Synthesis error: overloaded"
        assert isinstance(result.agent_results[0], AgentSuccess)

    def test_extended_mode(self):
        agents = _panel("p/a")
        mock_llm = _gateway({})

        result = _run(ask(
            "Q", "ru", Verbosity.EXTENDED, llm=mock_llm, agents=agents,
        ))

        assert result.verbosity is Verbosity.EXTENDED
        assert result.language == "ru"
        assert _agent_calls(mock_llm)[0]["max_tokens"] == 800
        assert mock_llm.complete.call_args_list[-1].kwargs["max_tokens"] == 4000

    def test_unknown_language_uses_default(self):
        mock_llm = _gateway({})
        result = _run(ask("Q", "fr", llm=mock_llm, agents=_panel("p/a")))
        assert result.language == "en"

    def test_document_sent_to_agents_but_question_echoed_bare(self):
        agents = _panel("p/a", "p/b")
        mock_llm = _gateway({})

        result = _run(ask(
            "Summarize", document_text="y" * 20000,
            llm=mock_llm, agents=agents,
        ))

        expected = "Summarize" + DOCUMENT_DELIMITER + "y" * 15000
        for call in _agent_calls(mock_llm):
            assert call["messages"][0]["content"] == expected
        assert result.question == "Summarize"

    def test_full_panel_session(self):
        mock_llm = _gateway({})

        result = _run(ask("Q", llm=mock_llm))

        assert [r.agent_name for r in result.agent_results] == [
            a.display_name for a in AGENTS
        ]
        assert mock_llm.complete.call_count == len(AGENTS) + 1

    @pytest.mark.parametrize("question", [None, "", "   ", "\n\t"])
    def test_empty_question_rejected(self, question):
        mock_llm = _gateway({})

        with pytest.raises(InvalidRequestError, match="Question missing"):
            _run(ask(question, llm=mock_llm))

        mock_llm.complete.assert_not_called()

    def test_missing_credential_fails_before_any_call(self):
        with patch.object(settings, "openrouter_api_key", ""), \
             patch.object(llm_module, "_provider", None), \
             patch("conductor.services.llm.AsyncOpenAI") as client_cls:
            with pytest.raises(MissingCredentialError):
                _run(ask("Q"))

        client_cls.assert_not_called()

    def test_default_gateway_from_factory(self):
        mock_llm = _gateway({})

        with patch.object(orchestrator, "get_llm_provider", return_value=mock_llm):
            result = _run(ask("Q", agents=_panel("p/a")))

        assert result.agent_results[0].response == "SYNTHESIS"
        assert mock_llm.complete.call_count == 2
