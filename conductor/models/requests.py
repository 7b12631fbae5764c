# =============================================================================
# API Request Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming INTO the API. Field names
# on the wire are camelCase (`fileContent`, `briefMode`) for the browser
# client; Python code uses snake_case through aliases.
#
# A missing, null or blank question is NOT rejected here: the
# orchestrator's `received` stage rejects it with a 400.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field

from conductor.agents.registry import Verbosity


class AskRequest(BaseModel):
    """
    Request body for POST /api/ask — put a question to the panel.

    Example:
        {
            "question": "Should we adopt policy P?",
            "lang": "en",
            "briefMode": false
        }
    """

    question: str | None = Field(
        default=None,
        max_length=10_000,
        description="The question for the panel",
        examples=["Should we adopt policy P?"],
    )

    # Unknown codes fall back to English rather than failing validation
    lang: str | None = Field(
        default="en",
        description="Response language: 'en', 'ru' or 'et'",
    )

    file_content: str | None = Field(
        default=None,
        alias="fileContent",
        description=(
            "Pre-extracted document text (see POST /api/upload). Truncated "
            "to the configured maximum and appended to the question."
        ),
    )

    brief_mode: bool = Field(
        default=False,
        alias="briefMode",
        description=(
            "Produce an extended multi-section strategic brief instead of "
            "the standard compact synthesis."
        ),
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"question": "Should we adopt policy P?", "lang": "en"},
                {
                    "question": "Assess the attached strategy",
                    "lang": "ru",
                    "fileContent": "...",
                    "briefMode": True,
                },
            ]
        },
    )

    @property
    def verbosity(self) -> Verbosity:
        return Verbosity.EXTENDED if self.brief_mode else Verbosity.STANDARD
