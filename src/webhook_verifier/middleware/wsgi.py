"""
WSGI middleware for webhook verification (Flask).
"""

from __future__ import annotations

import json
import logging
from io import BytesIO
from typing import Any, Callable, Iterable

from ..config import UNSET, WebhookConfig
from ..models import WebhookState
from ..receiver import WebhookReceiver
from . import DECISION_HEADER, rejection_status

logger = logging.getLogger(__name__)

ENVIRON_KEY = "webhook_verifier.state"

_STATUS_LINES = {
    400: "400 Bad Request",
    401: "401 Unauthorized",
}


def _environ_key(header_name: str) -> str:
    # webhook-signature -> HTTP_WEBHOOK_SIGNATURE
    return "HTTP_" + header_name.upper().replace("-", "_")


def _read_body(environ: dict[str, Any]) -> bytes:
    """Read the raw body and rewind the input stream for downstream apps."""
    stream = environ.get("wsgi.input")
    if stream is None:
        return b""

    content_length = environ.get("CONTENT_LENGTH")
    try:
        length = int(content_length) if content_length else None
    except ValueError:
        length = None

    body = stream.read(length) if length is not None else stream.read()
    environ["wsgi.input"] = BytesIO(body)
    environ["CONTENT_LENGTH"] = str(len(body))
    return body


class WebhookWSGIMiddleware:
    """
    WSGI middleware for webhook signature verification.

    Attaches verification state to `environ["webhook_verifier.state"]` with:
    - signed: bool - whether request had a signature header
    - result: VerificationResult | None - verification result if signed

    Args:
        app: WSGI application
        secret: Webhook signing secret (default: WEBHOOK_SECRET env var)
        tolerance: Timestamp tolerance in seconds, None to disable
            (default: WEBHOOK_TOLERANCE env var or 300)
        require_verified: If True, reject unsigned or failed requests.
            If False, operate in observe mode - attach state but allow all.
            Default: WEBHOOK_REQUIRE_VERIFIED env var, else observe mode.
        header_name: Signature header name (default: "webhook-signature")
        config: Prebuilt WebhookConfig; overrides the other arguments

    Example (Flask):
        >>> from flask import Flask, request
        >>> from webhook_verifier.middleware.wsgi import WebhookWSGIMiddleware
        >>>
        >>> app = Flask(__name__)
        >>> app.wsgi_app = WebhookWSGIMiddleware(app.wsgi_app, secret="whsec_...")
        >>>
        >>> @app.post("/webhooks")
        >>> def webhooks():
        ...     state = request.environ.get("webhook_verifier.state")
        ...     if state and state.signed and state.result.verified:
        ...         return {"received": state.result.event.id}
        ...     return {"error": "Not verified"}, 401
    """

    def __init__(
        self,
        app: Callable[..., Iterable[bytes]],
        secret: str | None = None,
        tolerance: float | None = UNSET,
        require_verified: bool | None = None,
        header_name: str | None = None,
        config: WebhookConfig | None = None,
    ):
        self.app = app
        if config is None:
            config = WebhookConfig(
                secret=secret,
                tolerance=tolerance,
                header_name=header_name,
                require_verified=require_verified,
            )
        self.require_verified = bool(config.require_verified)
        self.receiver = WebhookReceiver(config=config)

    def __call__(
        self,
        environ: dict[str, Any],
        start_response: Callable[..., Any],
    ) -> Iterable[bytes]:
        header = environ.get(_environ_key(self.receiver.header_name))
        path = environ.get("PATH_INFO", "/")

        if header is None:
            environ[ENVIRON_KEY] = WebhookState(signed=False, result=None)

            if self.require_verified:
                logger.info("Rejected unsigned webhook request to %s", path)
                return self._error_response(
                    start_response,
                    401,
                    "Missing webhook signature header",
                )

            return self.app(environ, start_response)

        body = _read_body(environ)
        result = self.receiver.verify_signed(body, header)
        environ[ENVIRON_KEY] = WebhookState(signed=True, result=result)

        if self.require_verified and not result.verified:
            logger.info("Rejected webhook request to %s: %s", path, result.error_kind)
            return self._error_response(
                start_response,
                rejection_status(result),
                result.error or "Signature verification failed",
            )

        def custom_start_response(
            status: str,
            response_headers: list[tuple[str, str]],
            exc_info: Any = None,
        ) -> Any:
            decision = "allow" if result.verified else "observe"
            response_headers.append((DECISION_HEADER, decision))
            return start_response(status, response_headers, exc_info)

        return self.app(environ, custom_start_response)

    def _error_response(
        self,
        start_response: Callable[..., Any],
        status: int,
        error: str,
    ) -> Iterable[bytes]:
        """Return a JSON error response."""
        body = json.dumps({"error": error}).encode("utf-8")
        start_response(
            _STATUS_LINES[status],
            [
                ("Content-Type", "application/json"),
                ("Content-Length", str(len(body))),
                (DECISION_HEADER, "deny"),
            ],
        )
        return [body]
