"""
Flask demo receiving signed webhooks.

Usage:
    # Install dependencies
    pip install -e ".[flask]"

    # Run the server
    WEBHOOK_SECRET=whsec_demo flask --app examples.flask_demo run --port 8010

Environment variables:
    WEBHOOK_SECRET - Signing secret (required)
    WEBHOOK_TOLERANCE - Timestamp tolerance in seconds, "off" to disable (default: 300)
    WEBHOOK_REQUIRE_VERIFIED - Set to "true" to reject unverified requests (default: observe mode)
"""

import logging

from flask import Flask, g, request, jsonify

from webhook_verifier import WebhookConfig
from webhook_verifier.middleware import WebhookWSGIMiddleware

logging.basicConfig(level=logging.INFO)

config = WebhookConfig()

app = Flask(__name__)

# Wrap with webhook verification middleware
app.wsgi_app = WebhookWSGIMiddleware(app.wsgi_app, config=config)


@app.before_request
def extract_webhook_state():
    """Extract webhook state from environ and attach to Flask g object."""
    g.webhook = request.environ.get("webhook_verifier.state")


@app.route("/webhooks", methods=["POST"])
def webhooks():
    """Webhook endpoint - handles verified events."""
    state = g.webhook

    if not state:
        return jsonify({"error": "Middleware not configured"}), 500

    if not state.signed or not state.result:
        return jsonify({"error": "No signature provided"}), 400

    if not state.result.verified:
        return jsonify({"error": state.result.error, "kind": state.result.error_kind}), 400

    event = state.result.event
    return jsonify({"received": True, "id": event.id, "type": event.type})


@app.route("/health")
def health():
    """Health check endpoint."""
    return jsonify({"status": "ok"})


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8010, debug=True)
