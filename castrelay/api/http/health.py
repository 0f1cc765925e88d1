"""Health check endpoint for monitoring service status."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from castrelay.connection_registry import connection_registry
from castrelay.schemas.profile import UserRole
from castrelay.utils.metrics import get_active_websocket_connections

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    connections: int
    hosts: int
    viewers: int


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check() -> HealthResponse:
    """
    Report service status and registry occupancy.

    The service has no external dependencies, so it is healthy whenever
    it can answer.

    Returns:
        HealthResponse: Status, open WebSocket connections and registered
        Hosts and Viewers.
    """
    return HealthResponse(
        status="healthy",
        connections=get_active_websocket_connections(),
        hosts=connection_registry.count(UserRole.HOST),
        viewers=connection_registry.count(UserRole.VIEWER),
    )
