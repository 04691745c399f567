"""HMAC helpers for authenticating store webhooks."""
from __future__ import annotations

import base64
import hashlib
import hmac

SIGNATURE_HEADER = "X-Shopify-Hmac-Sha256"


def compute_webhook_signature(raw_body: bytes, secret: str) -> str:
    """Return the base64 HMAC-SHA256 of the raw body, as sent in the signature header."""
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_webhook_signature(raw_body: bytes | None, signature: str | None, secret: str) -> bool:
    """Check a webhook signature against the exact bytes that were received.

    Missing input is reported as a failed verification rather than raised.
    """
    if not signature or not raw_body or not secret:
        return False

    expected = compute_webhook_signature(raw_body, secret).encode("ascii")
    try:
        received = signature.encode("ascii")
    except UnicodeEncodeError:
        return False
    return hmac.compare_digest(expected, received)
