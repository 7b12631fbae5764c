# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
# Each module defines an APIRouter for one feature:
#   - ask.py: POST /api/ask, the panel question endpoint
#   - upload.py: POST /api/upload, document text extraction
#   - intel.py: GET /api/intel, cached news digest
#   - agents.py: GET /api/agents and /api/agents/{agent_id}, panel listing
#   - health.py: GET /health
# =============================================================================
