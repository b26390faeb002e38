"""
Health check endpoints for the Collector Membership Service.
"""
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from app.core.config import get_settings
from app.core.dependencies import get_data_store
from app.core.logging import get_logger
from app.database.base import DataStore

router = APIRouter()
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    uptime_seconds: float
    timestamp: datetime
    service_name: str
    storage_healthy: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request, store: DataStore = Depends(get_data_store)):
    """
    Basic health check endpoint.

    Reports ``degraded`` when the data store cannot be reached.
    """
    settings = get_settings()

    start_time = getattr(request.app.state, "start_time", time.time())
    uptime = time.time() - start_time

    storage_healthy = await store.health_check()

    response = HealthResponse(
        status="healthy" if storage_healthy else "degraded",
        version=settings.service_version,
        uptime_seconds=uptime,
        timestamp=datetime.now(timezone.utc),
        service_name=settings.service_name,
        storage_healthy=storage_healthy,
    )

    logger.info(
        "Health check completed",
        status=response.status,
        uptime_seconds=response.uptime_seconds,
    )

    return response
