"""
Webhook Verifier for Python

Verify HMAC-SHA256 signed webhook payloads and construct typed events from them.
"""

from .config import DEFAULT_TOLERANCE, WebhookConfig
from .errors import (
    WebhookError,
    SignatureVerificationError,
    MalformedHeaderError,
    SignatureMismatchError,
    TimestampExpiredError,
    InvalidPayloadError,
    PayloadDecodeError,
)
from .headers import (
    EXPECTED_SCHEME,
    SIGNATURE_HEADER,
    parse_header,
    extract_signature_header,
    has_signature_header,
)
from .models import (
    Event,
    SignedHeader,
    VerificationContext,
    VerificationResult,
    WebhookState,
)
from .receiver import WebhookReceiver
from .signature import (
    WebhookSignature,
    compute_signature,
    signed_message,
    verify_header,
    verify_signed_header,
)
from .webhooks import Webhooks, construct_event, decode_event, generate_test_header_string

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_TOLERANCE",
    "WebhookConfig",
    "WebhookError",
    "SignatureVerificationError",
    "MalformedHeaderError",
    "SignatureMismatchError",
    "TimestampExpiredError",
    "InvalidPayloadError",
    "PayloadDecodeError",
    "EXPECTED_SCHEME",
    "SIGNATURE_HEADER",
    "parse_header",
    "extract_signature_header",
    "has_signature_header",
    "Event",
    "SignedHeader",
    "VerificationContext",
    "VerificationResult",
    "WebhookState",
    "WebhookReceiver",
    "WebhookSignature",
    "compute_signature",
    "signed_message",
    "verify_header",
    "verify_signed_header",
    "Webhooks",
    "construct_event",
    "decode_event",
    "generate_test_header_string",
    "WebhookWSGIMiddleware",
]

from .middleware.wsgi import WebhookWSGIMiddleware

# ASGI middleware import - optional, requires starlette
try:
    from .middleware.asgi import WebhookASGIMiddleware
    __all__.append("WebhookASGIMiddleware")
except ImportError:
    pass
