"""
HMAC-SHA256 signature computation and header verification.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import math
import time

from .errors import (
    InvalidPayloadError,
    SignatureMismatchError,
    TimestampExpiredError,
)
from .headers import EXPECTED_SCHEME, parse_header
from .models import SignedHeader, VerificationContext

logger = logging.getLogger(__name__)


def signed_message(timestamp: int, payload: str | bytes) -> bytes:
    """
    Build the signed message ``"{timestamp}.{payload}"``.

    The payload is used byte for byte; str payloads are encoded as UTF-8.
    """
    prefix = f"{int(timestamp)}.".encode("utf-8")
    if isinstance(payload, bytes):
        return prefix + payload
    return prefix + payload.encode("utf-8")


def compute_signature(payload: str | bytes, secret: str, timestamp: int) -> str:
    """
    Compute the expected signature for a payload.

    Args:
        payload: Raw request body
        secret: Shared signing secret
        timestamp: Timestamp bound into the signed message

    Returns:
        Lowercase hex HMAC-SHA256 digest

    Examples:
        >>> compute_signature('{"id":"evt_1","object":"event"}', "whsec_test", 1614556800)
        '47015ab257d644fb7a3b6eaadb2cf61b99e0c2a050d98dbf7d1e71f3d9ecf181'
    """
    return hmac.new(
        secret.encode("utf-8"),
        signed_message(timestamp, payload),
        hashlib.sha256,
    ).hexdigest()


def _any_signature_matches(expected: str, candidates: list[str]) -> bool:
    # Every candidate is compared; no early exit on the first match.
    expected_bytes = expected.encode("utf-8")
    matched = False
    for candidate in candidates:
        if hmac.compare_digest(expected_bytes, candidate.encode("utf-8")):
            matched = True
    return matched


def verify_header(
    payload: str | bytes,
    header: str | bytes,
    secret: str,
    tolerance: float | None = None,
    scheme: str = EXPECTED_SCHEME,
) -> None:
    """
    Verify a webhook signature header against a raw payload.

    Args:
        payload: Raw request body, exactly as received
        header: Signature header value
        secret: Shared signing secret
        tolerance: Maximum accepted age of the timestamp in seconds.
            None (default) skips the freshness check; 0 only accepts a
            timestamp from the current second or later.
        scheme: Signature scheme to verify (default: "v1")

    Raises:
        InvalidPayloadError: If payload is not str or bytes
        MalformedHeaderError: If the header cannot be parsed
        SignatureMismatchError: If no signature matches
        TimestampExpiredError: If the timestamp is older than tolerance
        ValueError: If tolerance is negative or not finite
    """
    _check_arguments(payload, header, tolerance)
    signed = parse_header(header, scheme=scheme)
    _verify_parsed(payload, signed, secret, tolerance, header)


def verify_signed_header(
    payload: str | bytes,
    signed: SignedHeader,
    secret: str,
    tolerance: float | None = None,
    header: str | bytes | None = None,
) -> None:
    """
    Verify an already parsed signature header against a raw payload.

    Same checks as :func:`verify_header`, for callers that parsed the
    header themselves. ``header`` is only attached to raised errors.
    """
    _check_arguments(payload, header, tolerance)
    _verify_parsed(payload, signed, secret, tolerance, header)


def _check_arguments(
    payload: str | bytes,
    header: str | bytes | None,
    tolerance: float | None,
) -> None:
    if tolerance is not None and (not math.isfinite(tolerance) or tolerance < 0):
        raise ValueError(
            "tolerance must be None or a finite, non-negative number of seconds"
        )

    if not isinstance(payload, (str, bytes)):
        raise InvalidPayloadError(
            "Webhook payload must be provided as a string or bytes, got "
            f"{type(payload).__name__}. Signature verification needs the raw "
            "request body; do not pass a parsed JSON object.",
            header=header,
            payload=None,
        )


def _verify_parsed(
    payload: str | bytes,
    signed: SignedHeader,
    secret: str,
    tolerance: float | None,
    header: str | bytes | None,
) -> None:
    ctx = VerificationContext(payload=payload, secret=secret, tolerance=tolerance)

    expected = compute_signature(ctx.payload, ctx.secret, signed.timestamp)
    if not _any_signature_matches(expected, signed.signatures):
        logger.debug(
            "Webhook signature mismatch (timestamp=%d, candidates=%d)",
            signed.timestamp,
            len(signed.signatures),
        )
        raise SignatureMismatchError(
            "No signatures found matching the expected signature for payload. "
            "Are you passing the raw request body you received, and the "
            "signing secret for this endpoint?",
            header=header,
            payload=payload,
        )

    if ctx.tolerance is not None:
        age = int(time.time()) - signed.timestamp
        if age > ctx.tolerance:
            logger.debug(
                "Webhook timestamp outside tolerance (timestamp=%d, age=%ds, tolerance=%ss)",
                signed.timestamp,
                age,
                ctx.tolerance,
            )
            raise TimestampExpiredError(
                "Timestamp outside the tolerance zone",
                header=header,
                payload=payload,
                timestamp=signed.timestamp,
                tolerance=ctx.tolerance,
            )


class WebhookSignature:
    """
    Signature operations grouped under one namespace.

    Example:
        >>> WebhookSignature.verify_header(payload, header, "whsec_...", tolerance=300)
    """

    EXPECTED_SCHEME = EXPECTED_SCHEME

    parse_header = staticmethod(parse_header)
    compute_signature = staticmethod(compute_signature)
    verify_header = staticmethod(verify_header)
    verify_signed_header = staticmethod(verify_signed_header)
