"""FastAPI exception handlers rendering each service's reply shape."""

import logging
from collections.abc import Callable
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hookrelay.errors.exceptions import ForwardError, RelayError
from hookrelay.models.responses import ForwardResponse, ReceiverResponse

logger = logging.getLogger(__name__)

ErrorRenderer = Callable[[RelayError], dict[str, Any]]


def render_validator_error(exc: RelayError) -> dict[str, Any]:
    """The provider's request was received only if it got as far as forwarding."""
    return ForwardResponse(
        received=isinstance(exc, ForwardError),
        forwarded=False,
        error=exc.message,
    ).model_dump(exclude_none=True)


def render_receiver_error(exc: RelayError) -> dict[str, Any]:
    return ReceiverResponse(success=False, error=exc.message).model_dump(exclude_none=True)


def register_exception_handlers(app: FastAPI, render: ErrorRenderer) -> None:
    """Register relay exception handlers on the FastAPI app."""

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        trace_id = getattr(request.state, "trace_id", "unknown")
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "Request failed: %s",
            exc.message,
            extra={
                "path": request.url.path,
                "method": request.method,
                "trace_id": trace_id,
                "code": exc.code,
                "status_code": exc.status_code,
            },
        )
        return JSONResponse(status_code=exc.status_code, content=render(exc))
