# =============================================================================
# Ask API — Panel Question Endpoint
# =============================================================================
#
# POST /api/ask runs one orchestration session:
#   1. Validate the question and gateway credential (fail fast, no calls)
#   2. Fan the question out to every panel agent in parallel
#   3. Synthesize the successful answers into one report
#
# Agent and synthesis failures are part of a 200 response. Only request
# and configuration errors produce a non-2xx status:
#   - empty question        → 400
#   - missing credential    → 500
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from conductor.agents.orchestrator import ask
from conductor.exceptions import InvalidRequestError, MissingCredentialError
from conductor.models.requests import AskRequest
from conductor.models.responses import AskResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Panel"])


@router.post(
    "/ask",
    response_model=AskResponse,
    response_model_exclude_none=True,
    summary="Ask the panel a question",
    description=(
        "Dispatches the question to every panel agent in parallel, then "
        "synthesizes their answers. Failed agents appear with an `error` "
        "field; the synthesis uses the successful answers only."
    ),
)
async def ask_endpoint(request: AskRequest) -> AskResponse:
    try:
        result = await ask(
            question=request.question,
            language=request.lang,
            verbosity=request.verbosity,
            document_text=request.file_content,
        )
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except MissingCredentialError as e:
        logger.error("Configuration error: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return AskResponse.from_result(result)
