"""
Webhook receiver: verifies incoming requests against a configured secret.
"""

from __future__ import annotations

import logging
from typing import Mapping

from .config import UNSET, WebhookConfig
from .errors import WebhookError
from .headers import extract_signature_header, parse_header
from .models import VerificationResult, WebhookState
from .signature import verify_signed_header
from .webhooks import decode_event

logger = logging.getLogger(__name__)


def _failure(error: WebhookError) -> VerificationResult:
    return VerificationResult(
        verified=False,
        error=str(error),
        error_kind=type(error).__name__,
    )


class WebhookReceiver:
    """
    Verifies signed webhook requests.

    Verifies like :func:`construct_event` using a :class:`WebhookConfig`, turning
    failures into a :class:`VerificationResult` instead of raising.

    Args:
        secret: Signing secret. Default: ``WEBHOOK_SECRET`` env var
        tolerance: Timestamp tolerance in seconds, None to disable.
            Default: ``WEBHOOK_TOLERANCE`` env var or 300
        header_name: Signature header name. Default: "webhook-signature"
        config: Prebuilt configuration; overrides the other arguments

    Example:
        >>> receiver = WebhookReceiver(secret="whsec_...")
        >>> state = receiver.verify(body, request.headers)
        >>> if state.signed and state.result.verified:
        ...     print(f"Received {state.result.event.type}")
    """

    def __init__(
        self,
        secret: str | None = None,
        tolerance: float | None = UNSET,
        header_name: str | None = None,
        config: WebhookConfig | None = None,
    ):
        if config is None:
            config = WebhookConfig(
                secret=secret,
                tolerance=tolerance,
                header_name=header_name,
            )
        self.config = config

    @property
    def tolerance(self) -> float | None:
        return self.config.tolerance

    @property
    def header_name(self) -> str:
        return self.config.header_name or ""

    def verify(
        self,
        body: str | bytes,
        headers: Mapping[str, str],
    ) -> WebhookState:
        """
        Verify a webhook request.

        Args:
            body: Raw request body
            headers: Request headers

        Returns:
            WebhookState with signed status and verification result
        """
        header = extract_signature_header(headers, self.header_name)
        if header is None:
            return WebhookState(signed=False, result=None)

        return WebhookState(signed=True, result=self.verify_signed(body, header))

    def verify_signed(self, body: str | bytes, header: str) -> VerificationResult:
        """Verify a body against an already extracted signature header."""
        scheme = self.config.scheme or ""
        try:
            signed = parse_header(header, scheme=scheme)
            verify_signed_header(
                body,
                signed,
                self.config.secret or "",
                tolerance=self.config.tolerance,
                header=header,
            )
            event = decode_event(body)
        except WebhookError as e:
            logger.debug("Webhook verification failed: %s", type(e).__name__)
            return _failure(e)

        return VerificationResult(
            verified=True,
            event=event,
            timestamp=signed.timestamp,
        )

