"""
FastAPI demo receiving signed webhooks.

Usage:
    # Install dependencies
    pip install -e ".[fastapi,asgi]"

    # Run the server
    WEBHOOK_SECRET=whsec_demo uvicorn examples.fastapi_demo:app --port 8009 --reload

Test with curl (generate a header with the helper in the package):
    BODY='{"id":"evt_1","object":"event","type":"charge.succeeded"}'
    SIG=$(python -c "from webhook_verifier import generate_test_header_string as g; \
print(g(payload='$BODY', secret='whsec_demo'))")
    curl -X POST http://localhost:8009/webhooks -H "Webhook-Signature: $SIG" -d "$BODY"

Environment variables:
    WEBHOOK_SECRET - Signing secret (required)
    WEBHOOK_TOLERANCE - Timestamp tolerance in seconds, "off" to disable (default: 300)
    WEBHOOK_REQUIRE_VERIFIED - Set to "true" to reject unverified requests (default: observe mode)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from webhook_verifier import WebhookASGIMiddleware, WebhookConfig

logging.basicConfig(level=logging.INFO)

config = WebhookConfig()

app = FastAPI(
    title="Webhook Receiver Demo API",
    description="Demo API receiving HMAC-signed webhooks",
    version="0.1.0",
)

app.add_middleware(WebhookASGIMiddleware, config=config)


@app.get("/")
async def root():
    """API info endpoint."""
    return {
        "service": "Webhook Receiver Demo API",
        "header": config.header_name,
        "tolerance": config.tolerance,
        "require_verified": config.require_verified,
        "endpoints": {
            "/webhooks": "POST signed events here",
        },
    }


@app.post("/webhooks")
async def webhooks(request: Request):
    """
    Webhook endpoint.

    In observe mode (require_verified=False):
        Returns 200 with the verification status.

    In require mode (require_verified=True):
        Unverified requests never reach this handler.
    """
    state = getattr(request.state, "webhook", None)

    if not state:
        return JSONResponse(
            status_code=500,
            content={"error": "Middleware not configured"},
        )

    if not state.signed or not state.result:
        return JSONResponse(status_code=400, content={"error": "No signature provided"})

    if not state.result.verified:
        return JSONResponse(
            status_code=400,
            content={"error": state.result.error, "kind": state.result.error_kind},
        )

    event = state.result.event
    return {"received": True, "id": event.id, "type": event.type}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8009)
