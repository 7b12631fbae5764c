# =============================================================================
# Services Package — Integrations
# =============================================================================
#   - llm.py: OpenRouter gateway client (OpenAI SDK)
#   - extractor.py: document text extraction with Docling
#   - digest.py: per-language cached news digest
# =============================================================================
