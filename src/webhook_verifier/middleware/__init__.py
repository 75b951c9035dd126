"""
Webhook verification middleware for ASGI and WSGI frameworks.

Re-exports middleware classes for convenient imports:
    from webhook_verifier.middleware import WebhookASGIMiddleware
    from webhook_verifier.middleware import WebhookWSGIMiddleware
"""

from ..models import VerificationResult

# Response header reporting the middleware decision: allow, observe or deny
DECISION_HEADER = "X-Webhook-Decision"


def rejection_status(result: VerificationResult) -> int:
    """HTTP status for a rejected request: 400 for undecodable payloads, else 401."""
    if result.error_kind == "PayloadDecodeError":
        return 400
    return 401


__all__: list[str] = ["DECISION_HEADER", "rejection_status"]

# ASGI middleware (FastAPI, Starlette)
try:
    from .asgi import WebhookASGIMiddleware
    __all__.append("WebhookASGIMiddleware")
except ImportError:
    pass

# WSGI middleware (Flask)
from .wsgi import WebhookWSGIMiddleware
__all__.append("WebhookWSGIMiddleware")
