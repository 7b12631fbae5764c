# =============================================================================
# Models Package — Pydantic V2 Schemas
# =============================================================================
#   - requests.py: API request bodies
#   - responses.py: API response bodies
# =============================================================================
