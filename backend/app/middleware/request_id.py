"""
DoctorWeb Backend - Request ID Middleware
===========================================

What:  Assigns a correlation ID to each request and echoes it in X-Request-ID.
How:   Reuses a client-supplied X-Request-ID (trimmed to 64 chars) or generates
       a short UUID prefix, stores it in a ContextVar and on request.state.
Who:   Read by the access logger and by every exception handler, which put it
       into the error envelope so a failed call can be found in the logs.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_REQUEST_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get("X-Request-ID", "").strip()
        rid = supplied[:MAX_REQUEST_ID_LENGTH] if supplied else str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
