"""Provider webhook signature verification.

Stripe signatures are checked with the official SDK against the raw request
bytes. Nothing here parses JSON before the signature has been accepted: a
single byte of re-encoding would invalidate the HMAC.

See:
    https://docs.stripe.com/webhooks#verify-events
    https://docs.github.com/webhooks/using-webhooks/validating-webhook-deliveries
"""

import hashlib
import hmac
import json
import logging
from typing import Any

import stripe

from hookrelay.errors.exceptions import (
    AuthenticationError,
    InvalidPayloadError,
    InvalidSignatureError,
)

logger = logging.getLogger(__name__)

STRIPE_SIGNATURE_HEADER = "stripe-signature"
GITHUB_SIGNATURE_HEADER = "x-hub-signature-256"
GITHUB_EVENT_HEADER = "x-github-event"

DEFAULT_STRIPE_TOLERANCE = 300


def verify_stripe_signature(
    body: bytes,
    header: str | None,
    secret: str,
    tolerance: int = DEFAULT_STRIPE_TOLERANCE,
) -> None:
    """Verify a Stripe ``t=<ts>,v1=<hex>`` signature header.

    Raises:
        InvalidSignatureError: header missing, secret unset, body not UTF-8,
            timestamp outside ``tolerance`` or no matching v1 signature.
    """
    if not header:
        raise InvalidSignatureError("No signature")
    if not secret:
        logger.warning("STRIPE_WEBHOOK_SECRET not set, rejecting webhook")
        raise InvalidSignatureError("Webhook secret not configured")

    try:
        payload = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidSignatureError("Webhook Error: body is not valid UTF-8") from exc

    try:
        stripe.WebhookSignature.verify_header(payload, header, secret, tolerance)
    except stripe.SignatureVerificationError as exc:
        raise InvalidSignatureError(f"Webhook Error: {exc.user_message or exc}") from exc


def parse_stripe_event(body: bytes) -> tuple[str, Any]:
    """Return ``(event type, data.object)`` from an already verified body."""
    try:
        event = json.loads(body)
    except ValueError as exc:
        raise InvalidPayloadError("Invalid Stripe event JSON") from exc

    if not isinstance(event, dict) or not isinstance(event.get("type"), str) or not event["type"]:
        raise InvalidPayloadError("Stripe event has no type")

    data = event.get("data")
    obj = data.get("object") if isinstance(data, dict) else None
    return event["type"], obj


def compute_github_signature(body: bytes, secret: str) -> str:
    """Compute the ``sha256=<hex>`` value GitHub sends for ``body``."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def verify_github_signature(body: bytes, header: str | None, secret: str) -> None:
    """Verify ``X-Hub-Signature-256`` in constant time.

    Raises:
        AuthenticationError: header missing or not matching.
    """
    if not header:
        raise AuthenticationError("No signature")

    expected = compute_github_signature(body, secret)
    if not hmac.compare_digest(expected.encode("utf-8"), header.encode("utf-8")):
        raise AuthenticationError("Invalid signature")
