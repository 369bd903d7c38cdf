"""
DoctorWeb Backend - Application Package Initializer
=====================================================

What: Marks the `app` directory as a Python package.
Who:  Imported by uvicorn (`app.main:app`), pytest and the package metadata.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, envelopes
    ├─────────────────────────────────────┤
    │     ContentService (typed access)   │  ← validated records per collection
    ├─────────────────────────────────────┤
    │   Models & Schemas (registry, data) │  ← collection registry + Pydantic
    ├─────────────────────────────────────┤
    │   DocumentStore (JSON persistence)  │  ← one file per collection
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
