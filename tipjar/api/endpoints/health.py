from datetime import datetime, timezone

from fastapi import status

from tipjar.core.config import settings
from tipjar.core.router_decorated import APIRouter
from tipjar.schemas.health import HealthCheck

router = APIRouter()


@router.get(
    "/health",
    tags=["health"],
    response_model=HealthCheck,
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
)
def get_health() -> HealthCheck:
    return HealthCheck(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.ENVIRONMENT,
    )
