# =============================================================================
# Panel Conductor
# =============================================================================
# Puts one question to a fixed panel of LLM agents in parallel, then has a
# conductor model synthesize their answers into one report.
#
# Package structure:
#   conductor/
#   ├── agents/    → panel registry, agent invoker, fan-out coordinator,
#   │                synthesizer and the LangGraph session graph
#   ├── api/       → FastAPI route handlers (ask, upload, intel, agents)
#   ├── models/    → Pydantic V2 request/response schemas
#   ├── services/  → gateway client, document extraction, news digest
#   ├── config.py  → pydantic-settings configuration
#   └── main.py    → application factory and lifespan
# =============================================================================
