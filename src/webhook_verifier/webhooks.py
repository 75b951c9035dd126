"""
Verified event construction and test header generation.
"""

from __future__ import annotations

import json
import time

from .config import DEFAULT_TOLERANCE
from .errors import PayloadDecodeError
from .headers import EXPECTED_SCHEME
from .models import Event
from .signature import WebhookSignature, compute_signature, verify_header


def construct_event(
    payload: str | bytes,
    header: str | bytes,
    secret: str,
    tolerance: float | None = None,
    scheme: str = EXPECTED_SCHEME,
) -> Event:
    """
    Verify a webhook request and return its event.

    The payload is only decoded after the signature has been verified.

    Args:
        payload: Raw request body, exactly as received
        header: Signature header value
        secret: Shared signing secret (e.g. ``whsec_...``)
        tolerance: Maximum accepted age of the timestamp in seconds.
            None (default) skips the freshness check.
        scheme: Signature scheme to verify (default: "v1")

    Returns:
        The verified Event

    Raises:
        SignatureVerificationError: If verification fails (see verify_header)
        PayloadDecodeError: If the verified payload is not a JSON object

    Example:
        >>> event = construct_event(request_body, request.headers["webhook-signature"],
        ...                         "whsec_...", tolerance=300)
        >>> if event.type == "charge.succeeded":
        ...     handle_charge(event.data)
    """
    verify_header(payload, header, secret, tolerance=tolerance, scheme=scheme)
    return decode_event(payload)


def decode_event(payload: str | bytes) -> Event:
    """
    Decode a verified payload into an Event.

    Raises:
        PayloadDecodeError: If the payload is not a JSON object
    """
    try:
        raw = json.loads(payload)
    except (ValueError, UnicodeDecodeError) as e:
        raise PayloadDecodeError(
            f"Invalid JSON in verified webhook payload: {e}",
            payload=payload,
        ) from e

    if not isinstance(raw, dict):
        raise PayloadDecodeError(
            f"Webhook payload must be a JSON object, got {type(raw).__name__}",
            payload=payload,
        )

    return Event.from_dict(raw)


def generate_test_header_string(
    *,
    payload: str | bytes,
    secret: str,
    timestamp: int | None = None,
    scheme: str = EXPECTED_SCHEME,
    signature: str | None = None,
) -> str:
    """
    Generate a signature header for a payload, for use in tests.

    Args:
        payload: Raw payload the header will accompany
        secret: Signing secret
        timestamp: Header timestamp. Default: current time
        scheme: Signature scheme key. Default: "v1"
        signature: Signature to embed instead of the computed one
            (useful for negative tests)

    Returns:
        Header value in the form ``t=<timestamp>,<scheme>=<signature>``

    Raises:
        ValueError: If payload or secret is missing

    Examples:
        >>> generate_test_header_string(payload='{"id":"evt_1","object":"event"}',
        ...                             secret="whsec_test", timestamp=1614556800)
        't=1614556800,v1=47015ab257d644fb7a3b6eaadb2cf61b99e0c2a050d98dbf7d1e71f3d9ecf181'
    """
    if payload is None:
        raise ValueError("payload is required to generate a test header")
    if not secret:
        raise ValueError("secret is required to generate a test header")

    if timestamp is None:
        timestamp = int(time.time())

    if signature is None:
        signature = compute_signature(payload, secret, timestamp)

    return f"t={int(timestamp)},{scheme}={signature}"


class Webhooks:
    """
    Webhook helpers grouped under one namespace.

    Attributes:
        DEFAULT_TOLERANCE: Suggested timestamp tolerance in seconds
        signature: Lower-level signature operations
    """

    DEFAULT_TOLERANCE = DEFAULT_TOLERANCE

    signature = WebhookSignature

    construct_event = staticmethod(construct_event)
    generate_test_header_string = staticmethod(generate_test_header_string)
