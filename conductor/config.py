# =============================================================================
# Application Configuration — Pydantic Settings
# =============================================================================
#
# DESIGN DECISION: Pydantic V2 `BaseSettings` for configuration.
# Values are validated at startup, loaded from environment variables and an
# optional .env file, with defaults suitable for local development.
#
# HOW IT WORKS:
# Pydantic Settings loads values in this priority order (highest first):
#   1. Environment variables (e.g., `OPENROUTER_API_KEY=...`)
#   2. Values from the .env file
#   3. Default values defined below
#
# USAGE:
#   from conductor.config import settings
#   print(settings.synthesis_model)
# =============================================================================

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Only OPENROUTER_API_KEY has no usable default. Without it the service
    starts, but every orchestration request is rejected before any
    gateway call is made.
    """

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    app_name: str = "Panel Conductor"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Gateway — OpenRouter (OpenAI-compatible chat completions)
    # -------------------------------------------------------------------------
    # One bearer token for every model on the panel. The gateway routes by
    # model identifier ("anthropic/claude-opus-4", "openai/gpt-4o", ...).
    #
    # Referer and title are OpenRouter's attribution headers; they are sent
    # on every call.
    # -------------------------------------------------------------------------
    openrouter_api_key: str = ""
    gateway_base_url: str = "https://openrouter.ai/api/v1"
    gateway_referer: str = "https://lazysusan.fly.dev"
    gateway_title: str = "Lazy Susan Orchestrator"
    gateway_timeout_seconds: float = 120.0

    # -------------------------------------------------------------------------
    # Orchestration
    # -------------------------------------------------------------------------
    # agent_timeout_seconds: ceiling for a single agent call.
    # session_deadline_seconds: ceiling for the whole fan-out. Agents still
    #   running at the deadline are cancelled and reported as failures.
    # synthesis_timeout_seconds: ceiling for the synthesis call.
    # -------------------------------------------------------------------------
    agent_temperature: float = 0.7
    synthesis_model: str = "anthropic/claude-opus-4"
    agent_timeout_seconds: float = 90.0
    session_deadline_seconds: float = 150.0
    synthesis_timeout_seconds: float = 180.0

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------
    # max_document_chars: attached text appended to a question.
    # max_upload_chars: text returned by POST /api/upload.
    # max_upload_bytes: raw upload size limit (10 MiB).
    # document_ocr_enabled: run Docling OCR on scanned PDF pages (slow).
    # -------------------------------------------------------------------------
    max_document_chars: int = 15_000
    max_upload_chars: int = 20_000
    max_upload_bytes: int = 10 * 1024 * 1024
    document_ocr_enabled: bool = False

    # -------------------------------------------------------------------------
    # News Digest
    # -------------------------------------------------------------------------
    digest_model: str = "perplexity/sonar-pro"
    digest_title: str = "Lazy Susan Intel"
    digest_ttl_seconds: int = 15 * 60
    digest_max_tokens: int = 1500
    digest_temperature: float = 0.3

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Create and cache a Settings instance.

    In tests, override with FastAPI's dependency_overrides:
        app.dependency_overrides[get_settings] = lambda: Settings(debug=True)
    """
    return Settings()


# ---------------------------------------------------------------------------
# Module-level convenience instance
# ---------------------------------------------------------------------------
# Import this directly in most cases:
#   from conductor.config import settings
# ---------------------------------------------------------------------------
settings = Settings()
