# =============================================================================
# Language Model Gateway — OpenRouter via the OpenAI SDK
# =============================================================================
#
# Provides a common interface for chat completions. The panel talks to a
# single OpenAI-compatible gateway (OpenRouter) that brokers calls to
# different backing models by identifier, so one client serves every agent:
# the model is chosen per call, not per provider instance.
#
# DESIGN DECISION: Protocol (structural typing) over ABC.
# Anything with the right `complete()` coroutine works — tests pass an
# AsyncMock, the service passes OpenRouterProvider.
#
# DESIGN DECISION: SDK retries are disabled.
# Every remote call is attempted exactly once per session. Failures are
# normalised into GatewayError / GatewayTransportError so callers only
# need to catch one family of exceptions.
#
# ARCHITECTURE:
#   LLMProvider (Protocol)
#   ├── OpenRouterProvider   — AsyncOpenAI pointed at the gateway
#   │   └── complete()       — system prompt as the first message
#   └── get_llm_provider()   — Singleton factory, reads from config
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import openai
from openai import AsyncOpenAI

from conductor.config import settings
from conductor.exceptions import (
    GatewayError,
    GatewayTransportError,
    MissingCredentialError,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass
class LLMResponse:
    """Normalised completion returned by the gateway."""

    content: str           # The generated text
    model: str             # Model identifier that served the request
    input_tokens: int      # Tokens consumed by the prompt
    output_tokens: int     # Tokens generated in the response


# ---------------------------------------------------------------------------
# Protocol Definition
# ---------------------------------------------------------------------------


class LLMProvider(Protocol):
    """
    Protocol defining the gateway interface.

    Implementations raise GatewayError for service-reported errors and
    GatewayTransportError for network failures; nothing else.
    """

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        model: str | None = None,
        title: str | None = None,
    ) -> LLMResponse:
        """
        Generate a completion.

        Args:
            messages: Conversation messages as dicts with "role" and "content".
                Roles: "user", "assistant" (no "system"; use the system param).
            system: System prompt, prepended as {"role": "system", ...}.
            temperature: Sampling temperature.
            max_tokens: Output token ceiling.
            model: Gateway model identifier (e.g. "openai/gpt-4o").
            title: Overrides the X-Title attribution header for this call.

        Returns:
            LLMResponse with generated text and usage metrics.
        """
        ...


# ---------------------------------------------------------------------------
# Implementation: OpenRouter
# ---------------------------------------------------------------------------


class OpenRouterProvider:
    """
    OpenRouter gateway using the OpenAI SDK with a custom base_url.

    The gateway sometimes answers HTTP 200 with an `error` object and no
    choices instead of an error status, and a proxy in front of it may
    answer 200 with a body that is not a completion at all. Both raise
    GatewayError.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        default_model: str | None = None,
    ) -> None:
        resolved_key = api_key or settings.openrouter_api_key
        if not resolved_key:
            raise MissingCredentialError(
                "OPENROUTER_API_KEY missing. Set it in the environment or .env"
            )

        resolved_base_url = base_url or settings.gateway_base_url
        self._client = AsyncOpenAI(
            api_key=resolved_key,
            base_url=resolved_base_url,
            timeout=settings.gateway_timeout_seconds,
            max_retries=0,
            default_headers={
                "HTTP-Referer": settings.gateway_referer,
                "X-Title": settings.gateway_title,
            },
        )
        self._default_model = default_model or settings.synthesis_model
        self._temperature = settings.agent_temperature

        logger.info(
            "Initialized OpenRouterProvider (base_url=%s, default_model=%s)",
            resolved_base_url, self._default_model,
        )

    async def complete(
        self,
        messages: list[dict[str, str]],
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        model: str | None = None,
        title: str | None = None,
    ) -> LLMResponse:
        """Generate a completion through the gateway."""
        all_messages: list[dict[str, str]] = []
        if system:
            all_messages.append({"role": "system", "content": system})
        all_messages.extend(messages)

        kwargs: dict = {
            "model": model or self._default_model,
            "messages": all_messages,
            "temperature": (
                self._temperature if temperature is None else temperature
            ),
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if title:
            kwargs["extra_headers"] = {"X-Title": title}

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except openai.APIStatusError as e:
            raise GatewayError(_status_error_message(e)) from e
        except openai.APIConnectionError as e:
            # APITimeoutError is a subclass; both are transport failures
            raise GatewayTransportError(str(e) or e.__class__.__name__) from e
        except openai.APIError as e:
            raise GatewayError(str(e) or e.__class__.__name__) from e
        except ValueError as e:
            # Undecodable JSON body on a 2xx reply
            raise GatewayError(f"Malformed gateway response: {e}") from e

        try:
            return _parse_completion(response, kwargs["model"])
        except (AttributeError, TypeError, IndexError) as e:
            # Non-JSON body (returned by the SDK as str) or missing fields
            raise GatewayError(f"Malformed gateway response: {e}") from e


def _parse_completion(response, requested_model: str) -> LLMResponse:
    """Normalise a chat completion; raises GatewayError for an error reply."""
    choices = getattr(response, "choices", None)
    if not choices:
        error = (response.model_extra or {}).get("error") or {}
        message = (
            error.get("message") if isinstance(error, dict) else str(error)
        )
        raise GatewayError(message or "Gateway returned no choices")

    content = choices[0].message.content or ""
    usage = response.usage

    return LLMResponse(
        content=content,
        model=response.model or requested_model,
        input_tokens=usage.prompt_tokens if usage else 0,
        output_tokens=usage.completion_tokens if usage else 0,
    )


def _status_error_message(error: openai.APIStatusError) -> str:
    """Prefer the gateway's own error message over the SDK's summary."""
    body = error.body
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return error.message


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

# Lazy singleton — the SDK client owns a connection pool
_provider: OpenRouterProvider | None = None


def get_llm_provider() -> OpenRouterProvider:
    """
    Return the process-wide gateway provider.

    Raises:
        MissingCredentialError: If OPENROUTER_API_KEY is not configured.
            Raised before any network activity.
    """
    global _provider
    if _provider is None:
        _provider = OpenRouterProvider()
    return _provider
