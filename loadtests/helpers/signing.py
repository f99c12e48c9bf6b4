"""Webhook signing for the fake payment gateway.

Mirrors the gateway's HMAC-SHA256 over the raw body, keyed by
``STOREFRONT_WEBHOOK_SECRET``.
"""

import hashlib
import hmac
import json
import os


def signed_webhook(event: dict) -> tuple[str, dict]:
    """Return ``(body, headers)`` for posting ``event`` to the webhook."""
    secret = os.getenv("STOREFRONT_WEBHOOK_SECRET", "whsec_storefront_dev")
    body = json.dumps(event)
    signature = hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()
    return body, {"Content-Type": "application/json", "X-Gateway-Signature": signature}
