# =============================================================================
# Agents Package — Fan-Out / Synthesis Orchestration
# =============================================================================
#   - registry.py: the fixed, ordered panel and language fallbacks
#   - invoker.py: one gateway call per agent, failures as values
#   - fan_out.py: all agents in parallel, results in registry order
#   - synthesizer.py: verbosity-keyed strategy table, one synthesis call
#   - orchestrator.py: LangGraph session graph (fan_out → synthesize)
# =============================================================================
