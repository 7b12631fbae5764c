# =============================================================================
# FastAPI Application — Entry Point
# =============================================================================
#
# Run locally:
#   uv run uvicorn conductor.main:app --reload
#
# LIFESPAN:
#   startup  — configure logging, create the digest cache on app.state,
#              warn if the gateway credential is missing
#   shutdown — nothing to release; the gateway client is created lazily
#              and closed with the process
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from conductor.api import agents, ask, health, intel, upload
from conductor.config import settings
from conductor.services.digest import DigestCache

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    app.state.digest_cache = DigestCache()

    if not settings.openrouter_api_key:
        logger.warning(
            "OPENROUTER_API_KEY is not set; /api/ask and /api/intel "
            "will reject requests until it is configured"
        )
    logger.info("%s %s started", settings.app_name, settings.app_version)
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(ask.router)
    app.include_router(upload.router)
    app.include_router(intel.router)
    app.include_router(agents.router)
    return app


app = create_app()
