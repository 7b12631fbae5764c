# =============================================================================
# Domain Exceptions
# =============================================================================
#
# Only request-level failures are exceptions. A failing agent or a failing
# synthesis call is an expected outcome of a fan-out and is carried as data
# (see agents/invoker.py and agents/synthesizer.py), never raised.
#
#   ConfigurationError
#   ├── InvalidRequestError     — missing/empty required input   → 400
#   └── MissingCredentialError  — gateway key not configured     → 500
#   ExtractionError
#   ├── UnsupportedDocumentError — unknown file extension        → 415
#   └── DocumentExtractionError  — parser failed on the content   → 422
#   GatewayError
#   └── GatewayTransportError   — network failure or timeout
# =============================================================================


class ConfigurationError(ValueError):
    """A session cannot start: detected before any gateway call."""


class InvalidRequestError(ConfigurationError):
    """A required input field is missing or empty."""


class MissingCredentialError(ConfigurationError):
    """The gateway bearer token is not configured."""


class ExtractionError(Exception):
    """Base class for document text extraction failures."""


class UnsupportedDocumentError(ExtractionError):
    """The file extension has no extraction strategy."""


class DocumentExtractionError(ExtractionError):
    """The extraction library could not read the document."""


class GatewayError(Exception):
    """The completion service reported an error for a request."""


class GatewayTransportError(GatewayError):
    """The completion service could not be reached or timed out."""
