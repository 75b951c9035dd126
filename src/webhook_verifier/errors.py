"""
Exception hierarchy for webhook verification.

All package exceptions inherit from :class:`WebhookError`. Signature
failures share :class:`SignatureVerificationError` so callers can reject a
request with a single ``except`` clause, while :class:`PayloadDecodeError`
stays outside it: the body was authentic but could not be decoded.
"""

from __future__ import annotations


class WebhookError(Exception):
    """Base exception for all webhook verification errors."""


class SignatureVerificationError(WebhookError):
    """
    Raised when a webhook payload cannot be authenticated.

    Attributes:
        header: The raw signature header value that was checked
        payload: The raw payload that was checked
    """

    def __init__(
        self,
        message: str,
        header: str | bytes | None = None,
        payload: str | bytes | None = None,
    ):
        super().__init__(message)
        self.header = header
        self.payload = payload


class MalformedHeaderError(SignatureVerificationError, ValueError):
    """Raised when the signature header is missing, empty or unparseable."""


class SignatureMismatchError(SignatureVerificationError):
    """Raised when no signature in the header matches the expected one."""


class TimestampExpiredError(SignatureVerificationError):
    """Raised when a validly signed header is older than the tolerance."""

    def __init__(
        self,
        message: str,
        header: str | bytes | None = None,
        payload: str | bytes | None = None,
        timestamp: int | None = None,
        tolerance: float | None = None,
    ):
        super().__init__(message, header=header, payload=payload)
        self.timestamp = timestamp
        self.tolerance = tolerance


class InvalidPayloadError(SignatureVerificationError, TypeError):
    """Raised when the payload is not the raw body (e.g. an already parsed dict)."""


class PayloadDecodeError(WebhookError, ValueError):
    """Raised when a verified payload is not a JSON object."""

    def __init__(self, message: str, payload: str | bytes | None = None):
        super().__init__(message)
        self.payload = payload
