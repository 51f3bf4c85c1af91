"""End-to-end: signed provider webhook -> validator -> receiver -> local command."""

import sys

import pytest
from httpx import ASGITransport, AsyncClient

from conftest import INTERNAL_KEY, sign_stripe, stripe_event_body
from hookrelay.config import ReceiverSettings
from hookrelay.main import create_receiver_app, create_validator_app
from hookrelay.services.dispatcher import CommandDispatcher
from hookrelay.services.forwarder import ReceiverForwarder

EXPECTED_MESSAGE = (
    "\U0001f514 Stripe: checkout.session.completed\n"
    "Customer: a@b.com\n"
    "Amount: 5USD\n"
    "Status: paid"
)


def _validator_for(receiver_app, validator_settings):
    forwarder = ReceiverForwarder(
        "http://receiver.test/webhook",
        INTERNAL_KEY,
        transport=ASGITransport(app=receiver_app),
    )
    return create_validator_app(validator_settings, forwarder=forwarder)


@pytest.mark.asyncio
async def test_signed_stripe_webhook_reaches_dispatcher(validator_settings, receiver_app, dispatcher):
    validator = _validator_for(receiver_app, validator_settings)
    body = stripe_event_body()

    async with AsyncClient(transport=ASGITransport(app=validator), base_url="http://validator.test") as client:
        response = await client.post("/stripe", content=body, headers={"stripe-signature": sign_stripe(body)})

    assert response.status_code == 200
    assert response.json() == {"received": True, "forwarded": True}
    assert dispatcher.messages == [EXPECTED_MESSAGE]


@pytest.mark.asyncio
async def test_message_arrives_as_single_argument(validator_settings, tmp_path):
    out = tmp_path / "argv.txt"
    script = (
        "import pathlib, sys; "
        "pathlib.Path(sys.argv[1]).write_text(repr(sys.argv[2:]), encoding='utf-8')"
    )
    receiver_settings = ReceiverSettings(
        internal_api_key=INTERNAL_KEY,
        relay_command=[sys.executable, "-c", script, str(out)],
    )
    receiver = create_receiver_app(receiver_settings)
    validator = _validator_for(receiver, validator_settings)
    body = stripe_event_body()

    async with AsyncClient(transport=ASGITransport(app=validator), base_url="http://validator.test") as client:
        response = await client.post("/stripe", content=body, headers={"stripe-signature": sign_stripe(body)})

    assert response.status_code == 200
    assert out.read_text(encoding="utf-8") == repr([EXPECTED_MESSAGE])


@pytest.mark.asyncio
async def test_receiver_rejection_propagates_as_500(validator_settings, receiver_settings, dispatcher):
    receiver = create_receiver_app(
        receiver_settings.model_copy(update={"internal_api_key": "a-different-key"}),
        dispatcher=dispatcher,
    )
    validator = _validator_for(receiver, validator_settings)
    body = stripe_event_body()

    async with AsyncClient(transport=ASGITransport(app=validator), base_url="http://validator.test") as client:
        response = await client.post("/stripe", content=body, headers={"stripe-signature": sign_stripe(body)})

    assert response.status_code == 500
    assert response.json() == {
        "received": True,
        "forwarded": False,
        "error": "Receiver responded with 401",
    }
    assert dispatcher.messages == []


@pytest.mark.asyncio
async def test_command_failure_propagates_as_500(validator_settings):
    receiver_settings = ReceiverSettings(
        internal_api_key=INTERNAL_KEY,
        relay_command=[sys.executable, "-c", "import sys; sys.exit(1)"],
    )
    receiver = create_receiver_app(receiver_settings)
    validator = _validator_for(receiver, validator_settings)

    async with AsyncClient(transport=ASGITransport(app=validator), base_url="http://validator.test") as client:
        response = await client.post("/github", json={"zen": "hi"}, headers={"x-github-event": "ping"})

    assert response.status_code == 500
    assert response.json()["error"] == "Receiver responded with 500"
