"""Public provider webhook endpoints on the validator."""

import json
import logging
from urllib.parse import parse_qs

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from hookrelay.errors.exceptions import ForwardError, InvalidPayloadError
from hookrelay.models.envelope import Provider, WebhookEnvelope
from hookrelay.models.responses import ForwardResponse
from hookrelay.services.signatures import (
    GITHUB_EVENT_HEADER,
    GITHUB_SIGNATURE_HEADER,
    STRIPE_SIGNATURE_HEADER,
    parse_stripe_event,
    verify_github_signature,
    verify_stripe_signature,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Providers"])

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


async def _forward(request: Request, envelope: WebhookEnvelope) -> JSONResponse:
    """Forward once; a failure is reported to the provider as 500."""
    forwarder = request.app.state.forwarder
    try:
        await forwarder.forward(envelope, trace_id=getattr(request.state, "trace_id", None))
    except ForwardError as exc:
        logger.error(
            "Failed to forward %s webhook: %s", envelope.provider.value, exc.message,
            extra={"webhook_event": envelope.event},
        )
        return JSONResponse(
            status_code=500,
            content=ForwardResponse(received=True, forwarded=False, error=exc.message).model_dump(
                exclude_none=True
            ),
        )
    return JSONResponse(
        content=ForwardResponse(received=True, forwarded=True).model_dump(exclude_none=True)
    )


@router.post("/stripe")
async def stripe_webhook(request: Request) -> JSONResponse:
    """Verify the Stripe signature over the raw body, then forward the event."""
    settings = request.app.state.settings
    body = await request.body()

    verify_stripe_signature(
        body,
        request.headers.get(STRIPE_SIGNATURE_HEADER),
        settings.stripe_webhook_secret,
        tolerance=settings.stripe_signature_tolerance,
    )
    event_type, data = parse_stripe_event(body)
    logger.info("Stripe webhook verified: %s", event_type)

    envelope = WebhookEnvelope(provider=Provider.STRIPE, event=event_type, data=data)
    return await _forward(request, envelope)


def _github_payload(body: bytes, content_type: str):
    """Decode a GitHub delivery sent as JSON or as a form with a ``payload`` field."""
    if content_type.split(";")[0].strip().lower() == FORM_CONTENT_TYPE:
        fields = parse_qs(body.decode("utf-8", errors="replace"))
        if "payload" not in fields:
            raise InvalidPayloadError("Missing payload form field")
        body = fields["payload"][0].encode()
    try:
        return json.loads(body)
    except ValueError as exc:
        raise InvalidPayloadError("Invalid JSON body") from exc


@router.post("/github")
async def github_webhook(request: Request) -> JSONResponse:
    """Forward a GitHub delivery.

    Deliveries are accepted unauthenticated unless GITHUB_WEBHOOK_SECRET is
    set, in which case X-Hub-Signature-256 must match the raw body.
    """
    settings = request.app.state.settings
    body = await request.body()

    if settings.github_webhook_secret:
        verify_github_signature(
            body,
            request.headers.get(GITHUB_SIGNATURE_HEADER),
            settings.github_webhook_secret,
        )

    data = _github_payload(body, request.headers.get("content-type", ""))

    event = request.headers.get(GITHUB_EVENT_HEADER) or "unknown"
    logger.info("GitHub webhook: %s", event)

    envelope = WebhookEnvelope(provider=Provider.GITHUB, event=event, data=data)
    return await _forward(request, envelope)
