# =============================================================================
# API Response Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming OUT of the API and are the
# contract with the browser client and the report renderer. Wire names
# are camelCase where the client expects them (`briefMode`, `lastUpdate`).
# =============================================================================

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from conductor.agents.invoker import AgentFailure, AgentResult
from conductor.agents.orchestrator import OrchestrationResult
from conductor.agents.registry import AgentDefinition, Verbosity
from conductor.services.digest import DigestFeed, DigestItem


class HealthResponse(BaseModel):
    """Response for GET /health — confirms the API is running."""

    status: str = "ok"
    version: str
    service: str
    timestamp: datetime


class AgentAnswer(BaseModel):
    """
    One agent slot in an ask response.

    Exactly one of `response` / `error` is set. Failed agents carry only
    their name and the error message.
    """

    agent: str = Field(description="Agent display name")
    role: str | None = Field(default=None, description="Localized role text")
    model: str | None = Field(default=None, description="Gateway model id")
    response: str | None = Field(default=None, description="The agent's answer")
    error: str | None = Field(default=None, description="Failure message")

    @classmethod
    def from_result(cls, result: AgentResult) -> AgentAnswer:
        if isinstance(result, AgentFailure):
            return cls(agent=result.agent_name, error=result.error)
        return cls(
            agent=result.agent_name,
            role=result.role,
            model=result.model,
            response=result.response,
        )


class AskResponse(BaseModel):
    """
    Response for POST /api/ask.

    `agents` always holds one entry per panel agent, in panel order.
    `synthesis` is the report, or a "Synthesis error: ..." message.
    """

    question: str = Field(description="The original question (echoed back)")
    lang: str = Field(description="Language actually used")
    brief_mode: bool = Field(alias="briefMode")
    verbosity: Verbosity
    timestamp: datetime
    agents: list[AgentAnswer]
    synthesis: str

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_result(cls, result: OrchestrationResult) -> AskResponse:
        return cls(
            question=result.question,
            lang=result.language,
            brief_mode=result.verbosity is Verbosity.EXTENDED,
            verbosity=result.verbosity,
            timestamp=result.timestamp,
            agents=[AgentAnswer.from_result(r) for r in result.agent_results],
            synthesis=result.synthesis,
        )


class UploadResponse(BaseModel):
    """Response for POST /api/upload — extracted document text."""

    filename: str
    text: str = Field(description="Extracted text, truncated")
    length: int = Field(description="Length of the full extracted text")


class DigestResponse(BaseModel):
    """Response for GET /api/intel — the cached news digest."""

    items: list[DigestItem]
    last_update: datetime | None = Field(alias="lastUpdate")
    cached: bool

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_feed(cls, feed: DigestFeed) -> DigestResponse:
        return cls(
            items=feed.items, last_update=feed.last_update, cached=feed.cached,
        )


class AgentInfo(BaseModel):
    """One panel agent as listed by GET /api/agents."""

    id: str
    name: str
    role: str
    model: str

    @classmethod
    def from_definition(cls, agent: AgentDefinition, language: str) -> AgentInfo:
        return cls(
            id=agent.id,
            name=agent.display_name,
            role=agent.role_for(language),
            model=agent.model_id,
        )
