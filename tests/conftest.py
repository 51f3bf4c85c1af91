"""Shared test fixtures."""

import hashlib
import hmac
import json
import time

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from hookrelay.config import ReceiverSettings, ValidatorSettings
from hookrelay.errors.exceptions import CommandExecutionError
from hookrelay.main import create_receiver_app, create_validator_app
from hookrelay.services.dispatcher import CommandResult
from hookrelay.services.forwarder import ReceiverForwarder

INTERNAL_KEY = "test-internal-key"
STRIPE_SECRET = "whsec_test_secret"
FORWARD_URL = "http://receiver.test/webhook"


class RecordingDispatcher:
    """Stands in for CommandDispatcher; records every message it is handed."""

    def __init__(self, error: CommandExecutionError | None = None) -> None:
        self.messages: list[str] = []
        self.error = error

    async def dispatch(self, message: str) -> CommandResult:
        self.messages.append(message)
        if self.error is not None:
            raise self.error
        return CommandResult(returncode=0, stdout="ok", stderr="")


def sign_stripe(body: bytes, secret: str = STRIPE_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header value the way Stripe does."""
    ts = int(time.time()) if timestamp is None else timestamp
    digest = hmac.new(secret.encode("utf-8"), f"{ts}.".encode("utf-8") + body, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def stripe_event_body(event_type: str = "checkout.session.completed", obj: dict | None = None) -> bytes:
    event = {
        "id": "evt_test_123",
        "object": "event",
        "type": event_type,
        "created": 1700000000,
        "data": {
            "object": obj
            if obj is not None
            else {
                "id": "cs_test_1",
                "customer_details": {"email": "a@b.com"},
                "amount_total": 500,
                "currency": "usd",
                "payment_status": "paid",
            }
        },
    }
    return json.dumps(event, separators=(",", ":")).encode("utf-8")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep a developer's .env or exported variables out of the tests."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "INTERNAL_API_KEY",
        "STRIPE_WEBHOOK_SECRET",
        "GITHUB_WEBHOOK_SECRET",
        "FORWARD_URL",
        "PORT",
        "HOST",
        "RATE_LIMIT",
        "ALLOWED_NETWORKS",
        "RELAY_COMMAND",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def validator_settings() -> ValidatorSettings:
    return ValidatorSettings(
        internal_api_key=INTERNAL_KEY,
        stripe_webhook_secret=STRIPE_SECRET,
        forward_url=FORWARD_URL,
    )


@pytest.fixture
def receiver_settings() -> ReceiverSettings:
    return ReceiverSettings(internal_api_key=INTERNAL_KEY)


@pytest.fixture
def forwarded() -> list[httpx.Request]:
    """Requests that reached the mocked receiver."""
    return []


@pytest.fixture
def receiver_status() -> dict:
    """Mutable knob for the mocked receiver's reply."""
    return {"status_code": 200, "json": {"success": True, "message": "Webhook processed"}}


@pytest.fixture
def mock_receiver_transport(forwarded, receiver_status) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        forwarded.append(request)
        return httpx.Response(receiver_status["status_code"], json=receiver_status["json"])

    return httpx.MockTransport(handler)


@pytest.fixture
def validator_app(validator_settings, mock_receiver_transport):
    forwarder = ReceiverForwarder(
        validator_settings.forward_url,
        validator_settings.internal_api_key,
        timeout=validator_settings.forward_timeout,
        transport=mock_receiver_transport,
    )
    return create_validator_app(validator_settings, forwarder=forwarder)


@pytest.fixture
async def validator_client(validator_app):
    transport = ASGITransport(app=validator_app)
    async with AsyncClient(transport=transport, base_url="http://validator.test") as ac:
        yield ac


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def receiver_app(receiver_settings, dispatcher):
    return create_receiver_app(receiver_settings, dispatcher=dispatcher)


@pytest.fixture
async def receiver_client(receiver_app):
    """Client connecting from loopback, which the network gate always admits."""
    transport = ASGITransport(app=receiver_app)
    async with AsyncClient(transport=transport, base_url="http://receiver.test") as ac:
        yield ac


@pytest.fixture
def receiver_client_from():
    """Factory for receiver clients connecting from an arbitrary address."""

    def _make(app, host: str) -> AsyncClient:
        transport = ASGITransport(app=app, client=(host, 40000))
        return AsyncClient(transport=transport, base_url="http://receiver.test")

    return _make
