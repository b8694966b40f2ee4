"""Health check endpoints for monitoring and deployment verification."""

from fastapi import APIRouter

from interlock.core.config import get_settings
from interlock.schemas.common import HealthResponse, HealthStatus

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Basic health check to verify the service is running. Used for liveness probes.",
)
async def health_check() -> HealthResponse:
    """Return basic health status.

    This endpoint should always return 200 if the service is running.
    Storage failures degrade to no-ops, so the medium is reported but not probed.

    Returns:
        HealthResponse: Current health status with timestamp.
    """
    return HealthResponse(status=HealthStatus.HEALTHY, storage_backend=get_settings().storage_backend)
