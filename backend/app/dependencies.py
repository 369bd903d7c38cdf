"""
DoctorWeb Backend - Request Dependencies
==========================================

What:  FastAPI dependencies handing the app's store and content service to routes.
How:   create_app() builds exactly one DocumentStore (rooted at DATA_DIR or an
       explicit directory) and one ContentService, and stores them on app.state.
       These functions just read them back for the current request.

Example usage in a route:
    @router.get("/doctors")
    async def list_doctors(service: ContentService = Depends(get_content_service)):
        return await service.doctors.all()
"""

from fastapi import Request

from app.services.content_service import ContentService
from app.services.document_store import DocumentStore


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_content_service(request: Request) -> ContentService:
    return request.app.state.content_service
