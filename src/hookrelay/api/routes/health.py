"""Health check endpoint."""

from fastapi import APIRouter, Request

from hookrelay.models.envelope import now_ms
from hookrelay.models.responses import HealthResponse

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Return service liveness with the service name and server clock."""
    return HealthResponse(
        service=request.app.state.service_name,
        timestamp=now_ms(),
    ).model_dump()
