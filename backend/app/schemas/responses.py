"""
DoctorWeb Backend - Response Envelope Schemas
===============================================

What:  The uniform JSON envelope wrapped around every API result.
How:   Success:  {"success": true,  "data": <result>}
       Failure:  {"success": false, "error": "<code>", "message": "...", "request_id": "..."}
Who:   Route handlers build success envelopes with `envelope()`; the exception
       handlers in main.py build failure envelopes with `error_envelope()`.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Failure envelope.

    Fields:
        error:      Machine-readable code (e.g. "not_found", "storage_unavailable")
        message:    Human-readable description
        details:    Optional extra context (validation errors only)
        request_id: Correlation ID for tracing this error in server logs
    """

    success: bool = Field(default=False)
    error: str = Field(description="Machine-readable error code")
    message: Optional[str] = Field(default=None, description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check payload returned by GET /health."""

    status: str = Field(description="OK when the content directory is readable, otherwise degraded")
    timestamp: str = Field(description="Current server time (UTC ISO 8601)")
    service: str = Field(description="Service name")
    version: str = Field(description="Application version")
    environment: str = Field(description="Runtime environment")
    storage: str = Field(description="Content storage: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")


def envelope(data: Any) -> Dict[str, Any]:
    return {"success": True, "data": data}


def error_envelope(
    error: str,
    message: Optional[str] = None,
    request_id: Optional[str] = None,
    details: Optional[dict] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "error": error}
    if message is not None:
        body["message"] = message
    if details:
        body["details"] = details
    if request_id:
        body["request_id"] = request_id
    return body
