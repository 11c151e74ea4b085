"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_session
from api.models.responses import HealthResponse
from core.config import API_VERSION
from services.session import HarvestSession

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(session: HarvestSession = Depends(get_session)):
    """
    Health check endpoint for monitoring.

    Returns 200 if healthy, 503 if Harvest credentials are missing.
    """
    credentials_configured = session.client.has_credentials
    timestamp = datetime.now(timezone.utc).isoformat()

    if credentials_configured:
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            credentials_configured=True,
            timestamp=timestamp,
        )
    else:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unhealthy",
                version=API_VERSION,
                credentials_configured=False,
                timestamp=timestamp,
                error="Harvest API credentials are not set",
            ).model_dump(),
        )
