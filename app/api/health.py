"""Health check endpoint with database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import get_container
from app.core.container import ServiceContainer
from app.core.database import check_db_connected
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(container: Annotated[ServiceContainer, Depends(get_container)]) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    connected = check_db_connected(container.session_factory)
    return HealthResponse(
        status="ok" if connected else "degraded",
        environment=container.settings.APP_ENV,
        database="connected" if connected else "disconnected",
    )
