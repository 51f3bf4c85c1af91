"""Routers mounted by each service."""

from fastapi import APIRouter

from hookrelay.api.routes import health, providers, webhook

validator_router = APIRouter()
validator_router.include_router(health.router, tags=["Health"])
validator_router.include_router(providers.router)

receiver_router = APIRouter()
receiver_router.include_router(health.router, tags=["Health"])
receiver_router.include_router(webhook.router)
