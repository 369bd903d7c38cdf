"""
DoctorWeb Backend - Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Body Size Limit] → [GZip] → [CORS] → Route

    - Request ID first, so every log line and error envelope can carry it
    - Logging sees the final status, including 413s from the size limit
    - The size limit rejects oversized bodies before a route parses them
"""
