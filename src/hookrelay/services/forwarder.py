"""Single-attempt forwarding of envelopes to the private receiver."""

import logging
from typing import Any

import httpx

from hookrelay.errors.exceptions import ForwardError
from hookrelay.models.envelope import ForwardRequest, WebhookEnvelope

logger = logging.getLogger(__name__)

INTERNAL_KEY_HEADER = "X-Internal-Key"
TRACE_ID_HEADER = "X-Trace-Id"


class ReceiverForwarder:
    """POSTs ``{payload: envelope}`` to the receiver with the shared secret.

    There is no retry: any transport error, timeout, non-2xx status or
    non-JSON reply is raised as ``ForwardError`` for the caller to report.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def forward(self, envelope: WebhookEnvelope, trace_id: str | None = None) -> Any:
        """Deliver one envelope; return the receiver's decoded JSON reply."""
        headers = {
            "Content-Type": "application/json",
            INTERNAL_KEY_HEADER: self._api_key,
        }
        if trace_id:
            headers[TRACE_ID_HEADER] = trace_id

        body = ForwardRequest(payload=envelope).to_wire()

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise ForwardError(f"Receiver timed out after {self._timeout}s") from exc
        except httpx.HTTPError as exc:
            raise ForwardError(str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            raise ForwardError(f"Receiver responded with {response.status_code}")

        try:
            result = response.json()
        except ValueError as exc:
            raise ForwardError("Receiver returned a non-JSON response") from exc

        logger.info(
            "Forwarded to receiver: %s/%s",
            envelope.provider.value,
            envelope.event,
            extra={"receiver_result": result},
        )
        return result
