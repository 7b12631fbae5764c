# =============================================================================
# Agents API — Panel Listing
# =============================================================================
#
# GET /api/agents lists the panel in registry order with roles in the
# requested language, so the client can render seats before an answer
# arrives. GET /api/agents/{agent_id} returns one seat.
# =============================================================================

from fastapi import APIRouter, HTTPException, Query

from conductor.agents.registry import AGENTS, get_agent, resolve_language
from conductor.models.responses import AgentInfo

router = APIRouter(prefix="/api", tags=["Panel"])


@router.get(
    "/agents",
    response_model=list[AgentInfo],
    summary="List panel agents",
)
async def list_agents(lang: str = Query(default="en")) -> list[AgentInfo]:
    language = resolve_language(lang)
    return [AgentInfo.from_definition(agent, language) for agent in AGENTS]


@router.get(
    "/agents/{agent_id}",
    response_model=AgentInfo,
    summary="Get one panel agent",
)
async def get_agent_info(
    agent_id: str,
    lang: str = Query(default="en"),
) -> AgentInfo:
    agent = get_agent(agent_id)
    if agent is None:
        raise HTTPException(status_code=404, detail=f"Agent '{agent_id}' not found")
    return AgentInfo.from_definition(agent, resolve_language(lang))
