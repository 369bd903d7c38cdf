"""
DoctorWeb Backend - Schemas Package
=====================================

    - content.py:    Pydantic models for every content record and singleton
    - responses.py:  Success/error envelopes and the health payload
"""
