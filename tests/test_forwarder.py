"""Tests for the validator -> receiver forwarding call."""

import json

import httpx
import pytest

from hookrelay.errors.exceptions import ForwardError
from hookrelay.models.envelope import Provider, WebhookEnvelope
from hookrelay.services.forwarder import ReceiverForwarder

URL = "http://100.99.47.83:9010/webhook"


def _envelope() -> WebhookEnvelope:
    return WebhookEnvelope(provider=Provider.GITHUB, event="push", data={"ref": "refs/heads/main"}, timestamp=5)


def _forwarder(handler) -> ReceiverForwarder:
    return ReceiverForwarder(URL, "secret", timeout=2.0, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_posts_envelope_with_shared_secret():
    seen: list[httpx.Request] = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"success": True, "message": "Webhook processed"})

    result = await _forwarder(handler).forward(_envelope(), trace_id="trc_abc")

    assert result == {"success": True, "message": "Webhook processed"}
    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == URL
    assert request.headers["X-Internal-Key"] == "secret"
    assert request.headers["X-Trace-Id"] == "trc_abc"
    assert json.loads(request.content) == {
        "payload": {
            "provider": "github",
            "event": "push",
            "data": {"ref": "refs/heads/main"},
            "timestamp": 5,
        }
    }


@pytest.mark.asyncio
async def test_no_trace_header_without_trace_id():
    seen: list[httpx.Request] = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"success": True})

    await _forwarder(handler).forward(_envelope())
    assert "X-Trace-Id" not in seen[0].headers


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 401, 403, 500, 502])
async def test_non_2xx_raises_once(status):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(status, json={"success": False})

    with pytest.raises(ForwardError, match=f"Receiver responded with {status}"):
        await _forwarder(handler).forward(_envelope())
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_non_json_reply_raises():
    with pytest.raises(ForwardError, match="non-JSON"):
        await _forwarder(lambda request: httpx.Response(200, text="ok")).forward(_envelope())


@pytest.mark.asyncio
async def test_timeout_raises():
    def handler(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(ForwardError, match="timed out after 2.0s"):
        await _forwarder(handler).forward(_envelope())


@pytest.mark.asyncio
async def test_connection_error_raises():
    def handler(request):
        raise httpx.ConnectError("no route to host", request=request)

    with pytest.raises(ForwardError, match="no route to host"):
        await _forwarder(handler).forward(_envelope())
