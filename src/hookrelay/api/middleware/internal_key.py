"""Shared-secret check on the internal validator -> receiver hop."""

import hmac
import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from hookrelay.models.responses import ReceiverResponse

logger = logging.getLogger(__name__)


class InternalKeyMiddleware(BaseHTTPMiddleware):
    """Require ``X-Internal-Key`` to equal the configured secret, else 401."""

    def __init__(self, app: ASGIApp, api_key: str) -> None:
        super().__init__(app)
        if not api_key:
            raise ValueError("api_key must not be empty")
        self._expected = api_key.encode("utf-8")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        provided = request.headers.get("x-internal-key", "")
        if not hmac.compare_digest(provided.encode("utf-8"), self._expected):
            host = request.client.host if request.client else None
            logger.warning("Invalid internal API key from %s", host)
            return JSONResponse(
                status_code=401,
                content=ReceiverResponse(success=False, error="Unauthorized").model_dump(exclude_none=True),
            )
        return await call_next(request)
