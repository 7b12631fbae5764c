# =============================================================================
# News Digest — Per-Language Cached Intel Feed
# =============================================================================
#
# GET /api/intel serves a short list of recent news items on a fixed set of
# topics. Items come from one gateway call to a search-capable model and
# are cached per feed language.
#
# CACHE CONTRACT:
#   - feed languages: "ru" and "en" (every other code maps to "en")
#   - an entry is fresh for `ttl_seconds` after its last refresh, and only
#     while it holds items
#   - a stale or empty entry triggers exactly one refresh call
#   - only a non-empty refresh overwrites the entry (last writer wins)
#   - on gateway or parse failure the previous items are served
#
# DESIGN DECISION: No lock. Two concurrent requests that both see a stale
# entry both refresh; the refresh is idempotent and the later write wins.
#
# The cache is created once in the FastAPI lifespan and lives on
# app.state; it is never a module global.
# =============================================================================

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from conductor.config import settings
from conductor.exceptions import GatewayError
from conductor.services.llm import LLMProvider

logger = logging.getLogger(__name__)

FEED_LANGUAGES = ("en", "ru")

DIGEST_TOPICS: dict[str, tuple[str, ...]] = {
    "en": (
        "Arctic development",
        "Biotech regulations",
        "EU AI governance",
        "Global strategic shifts",
    ),
    "ru": (
        "Арктика геополитика",
        "Биотехнологии РФ",
        "Технологическая политика",
        "Экономическая стратегия",
    ),
}

_ITEM_FORMAT = (
    '[{"title":"...","summary":"...","category":"ARCTIC|BIOTECH|TECH|STRATEGY",'
    '"importance":"HIGH|MEDIUM|LOW","time":"X hours ago"}]'
)

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


class DigestItem(BaseModel):
    """One news item as returned by the digest model."""

    title: str
    summary: str = ""
    category: str = ""
    importance: str = ""
    time: str = ""

    model_config = ConfigDict(extra="ignore")


_ITEMS_ADAPTER = TypeAdapter(list[DigestItem])


@dataclass
class DigestEntry:
    """Cached items for one feed language."""

    items: list[DigestItem] = field(default_factory=list)
    last_update: datetime | None = None


@dataclass(frozen=True)
class DigestFeed:
    """What the endpoint returns."""

    items: list[DigestItem]
    last_update: datetime | None
    cached: bool


# ---------------------------------------------------------------------------
# Prompt & Parsing
# ---------------------------------------------------------------------------


def feed_language(language: str | None) -> str:
    """Map a request language onto a feed language."""
    return "ru" if language == "ru" else "en"


def build_digest_prompt(language: str) -> str:
    topics = ", ".join(DIGEST_TOPICS[language])
    if language == "ru":
        return (
            f"Найди 5 важных новостей за 48 часов по темам: {topics}. "
            f"Формат JSON: {_ITEM_FORMAT}"
        )
    return (
        f"Find 5 important news from last 48 hours on: {topics}. "
        f"Format JSON: {_ITEM_FORMAT}"
    )


def parse_digest_items(content: str) -> list[DigestItem]:
    """
    Pull the JSON array out of a model reply.

    The reply may wrap the array in prose or a code fence; the span from
    the first "[" to the last "]" is parsed. Anything unparseable or not
    matching the item shape yields [].
    """
    match = _JSON_ARRAY.search(content)
    if not match:
        return []
    try:
        return _ITEMS_ADAPTER.validate_python(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("Digest reply not parseable: %s", e)
        return []


async def fetch_digest(language: str, llm: LLMProvider) -> list[DigestItem]:
    """One refresh call. Returns [] on any gateway or parse failure."""
    try:
        response = await llm.complete(
            messages=[{"role": "user", "content": build_digest_prompt(language)}],
            temperature=settings.digest_temperature,
            max_tokens=settings.digest_max_tokens,
            model=settings.digest_model,
            title=settings.digest_title,
        )
    except GatewayError as e:
        logger.error("Digest refresh failed (lang=%s): %s", language, e)
        return []
    return parse_digest_items(response.content)


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


class DigestCache:
    """Time-to-live cache of digest items, one entry per feed language."""

    def __init__(
        self,
        ttl_seconds: float | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._ttl = timedelta(
            seconds=settings.digest_ttl_seconds if ttl_seconds is None else ttl_seconds
        )
        self._now = now or (lambda: datetime.now(UTC))
        self._entries: dict[str, DigestEntry] = {
            lang: DigestEntry() for lang in FEED_LANGUAGES
        }

    def entry(self, language: str) -> DigestEntry:
        return self._entries[feed_language(language)]

    def is_fresh(self, entry: DigestEntry) -> bool:
        return (
            bool(entry.items)
            and entry.last_update is not None
            and self._now() - entry.last_update < self._ttl
        )

    async def get(self, language: str | None, llm: LLMProvider) -> DigestFeed:
        """Serve the feed, refreshing it first if stale or empty."""
        lang = feed_language(language)
        entry = self.entry(lang)

        if self.is_fresh(entry):
            return DigestFeed(
                items=entry.items, last_update=entry.last_update, cached=True,
            )

        logger.info("Refreshing digest (lang=%s)", lang)
        items = await fetch_digest(lang, llm)

        if items:
            refreshed = DigestEntry(items=items, last_update=self._now())
            self._entries[lang] = refreshed
            return DigestFeed(
                items=refreshed.items,
                last_update=refreshed.last_update,
                cached=False,
            )

        logger.warning(
            "Digest refresh empty (lang=%s); serving %d previous item(s)",
            lang, len(entry.items),
        )
        return DigestFeed(
            items=entry.items, last_update=entry.last_update, cached=False,
        )
