"""Rate limiting middleware using slowapi."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP"


class AddressRateLimiter(Limiter):
    """slowapi ``Limiter`` holding a single application-wide limit.

    Every request counts against one fixed-window counter per client address,
    whatever path it targets, so no route lookup is involved.
    """

    def __init__(self, limit: str, enabled: bool = True) -> None:
        super().__init__(
            key_func=get_remote_address,
            storage_uri="memory://",
            strategy="fixed-window",
            enabled=enabled,
        )
        self.application_limit = parse(limit)

    def hit_application_limit(self, request: Request) -> bool:
        """Count ``request``; False once its address is over the limit."""
        if not self.enabled:
            return True
        return self.limiter.hit(self.application_limit, "application", get_remote_address(request))


def build_limiter(limit: str, enabled: bool = True) -> AddressRateLimiter:
    """Fixed-window, per-client-address limiter with its own in-memory storage."""
    return AddressRateLimiter(limit, enabled=enabled)


def rate_limit_exceeded_response(request: Request, limiter: AddressRateLimiter) -> JSONResponse:
    logger.warning(
        "Rate limit exceeded for %s",
        get_remote_address(request),
        extra={"path": request.url.path, "limit": str(limiter.application_limit)},
    )
    return JSONResponse(status_code=429, content={"error": RATE_LIMIT_MESSAGE})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests over the app limiter's budget with 429."""

    async def dispatch(self, request: Request, call_next):
        limiter: AddressRateLimiter = request.app.state.limiter
        if not limiter.hit_application_limit(request):
            return rate_limit_exceeded_response(request, limiter)
        return await call_next(request)


def setup_rate_limiter(app: FastAPI, limiter: AddressRateLimiter) -> None:
    """Attach ``limiter`` to the app; it is checked ahead of every route."""
    app.state.limiter = limiter
    app.add_middleware(RateLimitMiddleware)
