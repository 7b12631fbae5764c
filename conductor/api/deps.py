# =============================================================================
# API Dependencies — Process-Scoped Objects for Route Handlers
# =============================================================================
#
# Objects created once in the application lifespan live on `app.state`.
# Route handlers reach them through these dependencies, so tests can swap
# them with `app.dependency_overrides`.
# =============================================================================

from __future__ import annotations

from fastapi import HTTPException, Request

from conductor.exceptions import MissingCredentialError
from conductor.services.digest import DigestCache
from conductor.services.llm import LLMProvider, get_llm_provider


def get_digest_cache(request: Request) -> DigestCache:
    """The digest cache created at startup."""
    return request.app.state.digest_cache


def get_gateway() -> LLMProvider:
    """
    The gateway provider for endpoints outside the orchestration session.

    Raises:
        HTTPException 500: OPENROUTER_API_KEY is not configured.
    """
    try:
        return get_llm_provider()
    except MissingCredentialError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
