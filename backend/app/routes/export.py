"""
DoctorWeb Backend - Bulk Export Route
=======================================

What:  GET /api/db returns every collection in one JSON object, keyed by
       collection name (the "db" layout the frontend mocks use).
How:   Delegates to ContentService.snapshot(), which reads all collection
       files concurrently. If any one file fails to read, the request fails
       with 500; a partial export is never returned.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from app.dependencies import get_content_service
from app.schemas.responses import ErrorResponse, envelope
from app.services.content_service import ContentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Export"])


@router.get(
    "/db",
    responses={500: {"description": "A collection could not be read", "model": ErrorResponse}},
    summary="Export all content collections",
)
async def export_all(
    service: ContentService = Depends(get_content_service),
) -> Dict[str, Any]:
    snapshot = await service.snapshot()
    logger.info("Exported %d collections", len(snapshot))
    return envelope(snapshot)
