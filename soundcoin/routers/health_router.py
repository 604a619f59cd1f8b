from datetime import datetime, timezone

from fastapi import APIRouter

from soundcoin.schemas.health import HealthCheckResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""

    return HealthCheckResponse(status="ok", timestamp=datetime.now(timezone.utc))
