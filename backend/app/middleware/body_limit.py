"""
DoctorWeb Backend - Request Body Size Limit
=============================================

What:  Rejects requests whose declared Content-Length exceeds MAX_BODY_SIZE.
How:   Inspects the header before the body is read and short-circuits with
       413 and the standard error envelope.
When:  Inside RequestID and logging (the 413 is logged and carries an ID),
       before any route reads the body.

Bodies sent without Content-Length (chunked) are not measured here.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.middleware.request_id import request_id_var
from app.schemas.responses import error_envelope

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                size = int(declared)
            except ValueError:
                return JSONResponse(
                    status_code=400,
                    content=error_envelope(
                        "validation_error",
                        "Invalid Content-Length header",
                        request_id_var.get(""),
                    ),
                )

            if size > settings.max_body_size:
                max_mb = settings.max_body_size / (1024 * 1024)
                logger.warning(
                    "Rejected %s %s: body of %d bytes exceeds %d",
                    request.method,
                    request.url.path,
                    size,
                    settings.max_body_size,
                )
                return JSONResponse(
                    status_code=413,
                    content=error_envelope(
                        "payload_too_large",
                        f"Request body exceeds maximum of {max_mb:.0f}MB",
                        request_id_var.get(""),
                    ),
                )

        return await call_next(request)
