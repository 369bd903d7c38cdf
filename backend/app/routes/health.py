"""
DoctorWeb Backend - Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer checks.
How:   Reports service identity and whether the content directory is reachable.
Who:   Called by Docker health checks, uptime monitors and the deploy script.

Status levels:
    - OK:        Content directory exists and is readable
    - degraded:  Process is up but content cannot be served (HTTP 200 still,
                 so the monitor sees the body instead of a bare failure)
"""

import logging
import time

from fastapi import APIRouter, Depends

from app import __version__
from app.config import settings
from app.dependencies import get_store
from app.schemas.responses import HealthResponse
from app.services.document_store import DocumentStore, format_timestamp, utc_now

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

SERVICE_NAME = "Doctor Web Server"

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(store: DocumentStore = Depends(get_store)) -> HealthResponse:
    storage_status = "available"
    overall = "OK"

    if not await store.is_available():
        storage_status = "unavailable"
        overall = "degraded"
        logger.warning("Health check: data directory unreachable: %s", store.data_dir)

    return HealthResponse(
        status=overall,
        timestamp=format_timestamp(utc_now()),
        service=SERVICE_NAME,
        version=__version__,
        environment=settings.environment,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
