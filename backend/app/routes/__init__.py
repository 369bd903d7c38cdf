"""
DoctorWeb Backend - API Routes Package
========================================

Route Inventory:
    - health.py:   GET /health                      (service health check)
    - export.py:   GET /api/db                      (snapshot of every collection)
    - content.py:  /api/<collection>                (generated per registry entry)
                     GET ""  POST ""  GET /id/{id}  GET /{slug}
                     PUT|PATCH /{id}  DELETE /{id}
                   /api/<singleton>                 GET ""  PUT|PATCH ""

Routes stay thin: they validate the body, call ContentService and wrap the
result in the success envelope.
"""
