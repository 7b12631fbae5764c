# =============================================================================
# Agent Registry — The Fixed Panel
# =============================================================================
#
# The panel is an immutable, ordered tuple of AgentDefinitions built at
# import time. Registry order is the order results are reported in, the
# order the synthesizer reads them in, and it never changes while the
# process runs.
#
# Role texts are localized per language. A missing translation is not an
# error: lookups fall back to the English text.
# =============================================================================

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

DEFAULT_LANGUAGE = "en"


class Verbosity(str, enum.Enum):
    """Report verbosity: compact synthesis or long-form strategic brief."""

    STANDARD = "standard"
    EXTENDED = "extended"


# ---------------------------------------------------------------------------
# Language Directives
# ---------------------------------------------------------------------------

LANGUAGE_INSTRUCTIONS: Mapping[str, str] = MappingProxyType({
    "en": "Respond in English only. Be precise, professional, and substantive.",
    "ru": (
        "Отвечай только на русском языке. "
        "Будь точным, профессиональным и содержательным."
    ),
    "et": "Vasta ainult eesti keeles. Ole täpne, professionaalne ja sisukas.",
})

SUPPORTED_LANGUAGES: tuple[str, ...] = tuple(LANGUAGE_INSTRUCTIONS)


def resolve_language(code: str | None) -> str:
    """Return `code` if the panel supports it, else the default language."""
    if code and code.lower() in LANGUAGE_INSTRUCTIONS:
        return code.lower()
    return DEFAULT_LANGUAGE


def language_instruction(language: str) -> str:
    """The "respond only in X" directive for a language (English fallback)."""
    return LANGUAGE_INSTRUCTIONS.get(
        language, LANGUAGE_INSTRUCTIONS[DEFAULT_LANGUAGE],
    )


# ---------------------------------------------------------------------------
# Agent Definitions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AgentDefinition:
    """One panel seat: a fixed perspective backed by a gateway model."""

    id: str
    display_name: str
    roles: Mapping[str, str]  # language code → localized role description
    model_id: str

    def role_for(self, language: str) -> str:
        """Localized role text, falling back to the default language."""
        return self.roles.get(language) or self.roles[DEFAULT_LANGUAGE]


def _agent(agent_id: str, name: str, model: str, **roles: str) -> AgentDefinition:
    return AgentDefinition(
        id=agent_id,
        display_name=name,
        roles=MappingProxyType(roles),
        model_id=model,
    )


AGENTS: tuple[AgentDefinition, ...] = (
    _agent(
        "architect", "Architect", "anthropic/claude-opus-4",
        en="Structures the problem, sees the system, identifies key leverage points",
        ru="Структурирует проблему, видит систему, определяет ключевые точки воздействия",
        et="Struktureerib probleemi, näeb süsteemi, tuvastab võtmekohad",
    ),
    _agent(
        "redteam", "Red Team", "openai/gpt-4o",
        en="Finds weaknesses, attacks assumptions, stress-tests logic",
        ru="Ищет слабости, атакует допущения, проверяет логику на прочность",
        et="Otsib nõrkusi, ründab eeldusi, testib loogikat",
    ),
    _agent(
        "synth", "Synthesizer", "anthropic/claude-opus-4",
        en="Connects different views, finds deep patterns, builds bridges",
        ru="Соединяет разные взгляды, находит глубинные паттерны, строит мосты",
        et="Ühendab erinevad vaated, leiab sügavad mustrid, ehitab sildu",
    ),
    _agent(
        "facts", "Facts", "perplexity/sonar-pro",
        en="Checks facts in real-time, searches latest sources, verifies claims",
        ru="Проверяет факты в реальном времени, ищет последние источники, "
           "верифицирует утверждения",
        et="Kontrollib fakte reaalajas, otsib värskeid allikaid, verifitseerib väiteid",
    ),
    _agent(
        "style", "Style", "anthropic/claude-opus-4",
        en="Polishes language, ensures clarity, makes compelling",
        ru="Шлифует язык, обеспечивает ясность, делает убедительным",
        et="Viimistleb keele, tagab selguse, teeb veenvaks",
    ),
    _agent(
        "futurist", "Futurist", "anthropic/claude-opus-4",
        en="Long-term trends, 10-100 year horizon, civilizational perspective",
        ru="Долгосрочные тренды, горизонт 10-100 лет, цивилизационная перспектива",
        et="Pikaajalised trendid, 10-100 aasta horisont, tsivilisatsiooniline perspektiiv",
    ),
    _agent(
        "devil", "Devil's Advocate", "openai/gpt-4o",
        en="Argues opposite position, challenges consensus, tests robustness",
        ru="Аргументирует противоположную позицию, оспаривает консенсус, "
           "проверяет устойчивость",
        et="Argumenteerib vastupidist, vaidlustab konsensust, testib vastupidavust",
    ),
)


def get_agent(agent_id: str) -> AgentDefinition | None:
    """Look up a panel agent by its stable id."""
    for agent in AGENTS:
        if agent.id == agent_id:
            return agent
    return None
