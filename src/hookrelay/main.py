"""FastAPI application factories and lifespan management."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from hookrelay.api.middleware.internal_key import InternalKeyMiddleware
from hookrelay.api.middleware.network_gate import NetworkGateMiddleware
from hookrelay.api.middleware.rate_limit import (
    AddressRateLimiter,
    build_limiter,
    setup_rate_limiter,
)
from hookrelay.api.middleware.trace_id import TraceIdMiddleware
from hookrelay.api.router import receiver_router, validator_router
from hookrelay.config import ReceiverSettings, ValidatorSettings
from hookrelay.errors.handlers import (
    register_exception_handlers,
    render_receiver_error,
    render_validator_error,
)
from hookrelay.services.dispatcher import CommandDispatcher
from hookrelay.services.forwarder import ReceiverForwarder

logger = logging.getLogger(__name__)

VALIDATOR_SERVICE = "webhook-validator"
RECEIVER_SERVICE = "webhook-receiver"
VERSION = "1.0.0"


def _configured(value: str) -> str:
    return "configured" if value else "NOT SET"


@asynccontextmanager
async def validator_lifespan(app: FastAPI):
    settings: ValidatorSettings = app.state.settings
    logger.info("Webhook validator running on port %d", settings.port)
    logger.info("Forward URL: %s", settings.forward_url)
    logger.info("Stripe webhook secret: %s", _configured(settings.stripe_webhook_secret))
    logger.info("Stripe API key: %s", _configured(settings.stripe_secret_key))
    if not settings.stripe_webhook_secret:
        logger.warning("STRIPE_WEBHOOK_SECRET not set, every Stripe webhook will be rejected")
    if not settings.github_webhook_secret:
        logger.warning("GITHUB_WEBHOOK_SECRET not set, GitHub webhooks are accepted unauthenticated")
    yield
    logger.info("Webhook validator shutdown complete")


@asynccontextmanager
async def receiver_lifespan(app: FastAPI):
    settings: ReceiverSettings = app.state.settings
    logger.info("Webhook receiver running on port %d", settings.port)
    logger.info("Internal API key: %s", _configured(settings.internal_api_key))
    logger.info("Accepting webhooks from %s and loopback", ", ".join(settings.allowed_networks))
    logger.info("Relay command: %s", " ".join(settings.relay_command))
    yield
    logger.info("Webhook receiver shutdown complete")


def create_validator_app(
    settings: ValidatorSettings,
    forwarder: ReceiverForwarder | None = None,
    limiter: AddressRateLimiter | None = None,
) -> FastAPI:
    """Create the public validator: rate limit, verify, forward."""
    app = FastAPI(
        title="Webhook Validator",
        version=VERSION,
        description="Verifies provider webhooks and forwards them to the private receiver.",
        lifespan=validator_lifespan,
    )
    app.state.service_name = VALIDATOR_SERVICE
    app.state.settings = settings
    app.state.forwarder = forwarder or ReceiverForwarder(
        settings.forward_url,
        settings.internal_api_key,
        timeout=settings.forward_timeout,
    )

    register_exception_handlers(app, render_validator_error)

    # Order matters: last added = first executed
    setup_rate_limiter(
        app,
        limiter or build_limiter(settings.rate_limit, enabled=settings.rate_limit_enabled),
    )
    app.add_middleware(TraceIdMiddleware)

    app.include_router(validator_router)
    return app


def create_receiver_app(
    settings: ReceiverSettings,
    dispatcher: CommandDispatcher | None = None,
) -> FastAPI:
    """Create the private receiver: network gate, key gate, format, execute."""
    app = FastAPI(
        title="Webhook Receiver",
        version=VERSION,
        description="Turns relayed webhooks into local command invocations.",
        lifespan=receiver_lifespan,
    )
    app.state.service_name = RECEIVER_SERVICE
    app.state.settings = settings
    app.state.dispatcher = dispatcher or CommandDispatcher(
        settings.relay_command,
        timeout=settings.command_timeout,
    )

    register_exception_handlers(app, render_receiver_error)

    # Order matters: last added = first executed
    app.add_middleware(InternalKeyMiddleware, api_key=settings.internal_api_key)
    app.add_middleware(NetworkGateMiddleware, networks=settings.allowed_networks)
    app.add_middleware(TraceIdMiddleware)

    app.include_router(receiver_router)
    return app
