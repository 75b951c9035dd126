"""
ASGI middleware for webhook verification (FastAPI/Starlette).
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..config import UNSET, WebhookConfig
from ..models import WebhookState
from ..receiver import WebhookReceiver
from . import DECISION_HEADER, rejection_status

logger = logging.getLogger(__name__)


class WebhookASGIMiddleware(BaseHTTPMiddleware):
    """
    ASGI middleware for webhook signature verification.

    Attaches verification state to `request.state.webhook` with:
    - signed: bool - whether request had a signature header
    - result: VerificationResult | None - verification result if signed

    Args:
        app: ASGI application
        secret: Webhook signing secret (default: WEBHOOK_SECRET env var)
        tolerance: Timestamp tolerance in seconds, None to disable
            (default: WEBHOOK_TOLERANCE env var or 300)
        require_verified: If True, reject unsigned or failed requests.
            If False, operate in observe mode - attach state but allow all.
            Default: WEBHOOK_REQUIRE_VERIFIED env var, else observe mode.
        header_name: Signature header name (default: "webhook-signature")
        config: Prebuilt WebhookConfig; overrides the other arguments

    Example (FastAPI):
        >>> from fastapi import FastAPI, Request
        >>> from webhook_verifier import WebhookASGIMiddleware
        >>>
        >>> app = FastAPI()
        >>> app.add_middleware(WebhookASGIMiddleware, secret="whsec_...", require_verified=True)
        >>>
        >>> @app.post("/webhooks")
        >>> async def webhooks(request: Request):
        ...     event = request.state.webhook.result.event
        ...     return {"received": event.id}
    """

    def __init__(
        self,
        app: Any,
        secret: str | None = None,
        tolerance: float | None = UNSET,
        require_verified: bool | None = None,
        header_name: str | None = None,
        config: WebhookConfig | None = None,
    ):
        super().__init__(app)
        if config is None:
            config = WebhookConfig(
                secret=secret,
                tolerance=tolerance,
                header_name=header_name,
                require_verified=require_verified,
            )
        self.require_verified = bool(config.require_verified)
        self.receiver = WebhookReceiver(config=config)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        header = request.headers.get(self.receiver.header_name)

        if header is None:
            request.state.webhook = WebhookState(signed=False, result=None)

            if self.require_verified:
                logger.info("Rejected unsigned webhook request to %s", request.url.path)
                return JSONResponse(
                    status_code=401,
                    content={"error": "Missing webhook signature header"},
                    headers={DECISION_HEADER: "deny"},
                )

            return await call_next(request)

        body = await request.body()
        result = self.receiver.verify_signed(body, header)
        request.state.webhook = WebhookState(signed=True, result=result)

        if self.require_verified and not result.verified:
            logger.info(
                "Rejected webhook request to %s: %s",
                request.url.path,
                result.error_kind,
            )
            return JSONResponse(
                status_code=rejection_status(result),
                content={
                    "error": result.error or "Signature verification failed",
                },
                headers={DECISION_HEADER: "deny"},
            )

        response = await call_next(request)
        response.headers[DECISION_HEADER] = "allow" if result.verified else "observe"
        return response
