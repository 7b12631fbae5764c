# =============================================================================
# Intel API — Cached News Digest
# =============================================================================
#
# GET /api/intel?lang=ru|en serves the digest from the process cache,
# refreshing it through the gateway when stale (see services/digest.py).
# =============================================================================

from fastapi import APIRouter, Depends, Query

from conductor.api.deps import get_digest_cache, get_gateway
from conductor.models.responses import DigestResponse
from conductor.services.digest import DigestCache
from conductor.services.llm import LLMProvider

router = APIRouter(prefix="/api", tags=["Intel"])


@router.get(
    "/intel",
    response_model=DigestResponse,
    summary="Recent news digest",
)
async def intel_endpoint(
    lang: str = Query(default="en"),
    cache: DigestCache = Depends(get_digest_cache),
    llm: LLMProvider = Depends(get_gateway),
) -> DigestResponse:
    feed = await cache.get(lang, llm)
    return DigestResponse.from_feed(feed)
