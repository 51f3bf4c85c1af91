"""Internal webhook endpoint on the receiver."""

import logging

from fastapi import APIRouter, Request
from pydantic import ValidationError

from hookrelay.errors.exceptions import InvalidPayloadError
from hookrelay.models.envelope import ForwardRequest
from hookrelay.models.responses import ReceiverResponse
from hookrelay.services.formatter import format_webhook_message

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Webhook"])


async def _read_forward_request(request: Request) -> ForwardRequest:
    try:
        body = await request.json()
    except ValueError as exc:
        raise InvalidPayloadError() from exc
    try:
        return ForwardRequest.model_validate(body)
    except ValidationError as exc:
        logger.debug("Envelope validation failed: %s", exc)
        raise InvalidPayloadError() from exc


@router.post("/webhook")
async def receive_webhook(request: Request) -> dict:
    """Format the relayed envelope and hand it to the local command."""
    envelope = (await _read_forward_request(request)).payload
    logger.info("Received webhook: %s/%s", envelope.provider.value, envelope.event)

    message = format_webhook_message(envelope)
    await request.app.state.dispatcher.dispatch(message)

    return ReceiverResponse(success=True, message="Webhook processed").model_dump(exclude_none=True)
