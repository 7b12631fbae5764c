from datetime import UTC, datetime

from fastapi import APIRouter

from conductor.config import settings
from conductor.models.responses import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not contact the gateway."""
    return HealthResponse(
        version=settings.app_version,
        service=settings.app_name,
        timestamp=datetime.now(UTC),
    )
