"""
DoctorWeb Backend - Content Route Handlers
============================================

What:  HTTP endpoints for every registered collection.
How:   build_collection_router() / build_document_router() generate one router
       per CollectionSpec, so every collection exposes the same verbs with its
       own path, OpenAPI tag and "<Label> not found" message.
Who:   Called by the website frontend and the admin tooling.

Endpoints (list collections, e.g. /api/doctors):
    GET     /api/<name>                 all records
    GET     /api/<name>/<slug>          by slug (slug_route collections only)
    GET     /api/<name>/id/<id>         by id
    POST    /api/<name>                 create → 201
    PUT     /api/<name>/<id>            merge update
    PATCH   /api/<name>/<id>            merge update
    DELETE  /api/<name>/<id>            delete

Endpoints (singleton documents, e.g. /api/seo-settings):
    GET     /api/<name>
    PUT     /api/<name>                 merge update
    PATCH   /api/<name>                 merge update

Handlers stay thin: call the accessor (which checks the body against the
record schema before anything is written), turn None/False into
NotFoundError, wrap the result in the envelope. Validation and storage
failures propagate to the global exception handlers.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from app.dependencies import get_content_service
from app.exceptions import NotFoundError
from app.models.collection import COLLECTIONS, CollectionSpec
from app.schemas.responses import ErrorResponse, envelope
from app.services.content_service import ContentService

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"description": "Invalid request body", "model": ErrorResponse},
    500: {"description": "Content storage failure", "model": ErrorResponse},
}
NOT_FOUND_RESPONSE = {404: {"description": "Record not found", "model": ErrorResponse}}
CONFLICT_RESPONSE = {409: {"description": "Slug already in use", "model": ErrorResponse}}


def build_collection_router(spec: CollectionSpec) -> APIRouter:
    router = APIRouter(prefix=f"/api/{spec.name}", tags=[spec.label])

    @router.get(
        "",
        responses={500: ERROR_RESPONSES[500]},
        summary=f"List all {spec.name}",
    )
    async def list_records(
        service: ContentService = Depends(get_content_service),
    ) -> Dict[str, Any]:
        records = await service.collection(spec.name).all()
        return envelope([r.to_wire() for r in records])

    @router.get(
        "/id/{record_id}",
        responses={**NOT_FOUND_RESPONSE, 500: ERROR_RESPONSES[500]},
        summary=f"Get one {spec.label.lower()} by id",
    )
    async def get_record_by_id(
        record_id: str,
        service: ContentService = Depends(get_content_service),
    ) -> Dict[str, Any]:
        record = await service.collection(spec.name).get_by_id(record_id)
        if record is None:
            raise NotFoundError(resource=spec.label, key=record_id)
        return envelope(record.to_wire())

    if spec.slug_route:

        @router.get(
            "/{slug}",
            responses={**NOT_FOUND_RESPONSE, 500: ERROR_RESPONSES[500]},
            summary=f"Get one {spec.label.lower()} by slug",
        )
        async def get_record_by_slug(
            slug: str,
            service: ContentService = Depends(get_content_service),
        ) -> Dict[str, Any]:
            record = await service.collection(spec.name).get_by_slug(slug)
            if record is None:
                raise NotFoundError(resource=spec.label, key=slug)
            return envelope(record.to_wire())

    @router.post(
        "",
        status_code=201,
        responses={**ERROR_RESPONSES, **CONFLICT_RESPONSE},
        summary=f"Create a {spec.label.lower()}",
    )
    async def create_record(
        payload: Dict[str, Any] = Body(...),
        service: ContentService = Depends(get_content_service),
    ) -> Dict[str, Any]:
        record = await service.collection(spec.name).create(payload)
        return envelope(record.to_wire())

    async def update_record(
        record_id: str,
        payload: Dict[str, Any] = Body(...),
        service: ContentService = Depends(get_content_service),
    ) -> Dict[str, Any]:
        record = await service.collection(spec.name).update(record_id, payload)
        if record is None:
            raise NotFoundError(resource=spec.label, key=record_id)
        return envelope(record.to_wire())

    update_responses = {**ERROR_RESPONSES, **NOT_FOUND_RESPONSE, **CONFLICT_RESPONSE}
    router.add_api_route(
        "/{record_id}",
        update_record,
        methods=["PUT"],
        responses=update_responses,
        summary=f"Update a {spec.label.lower()}",
        name="replace_record",
    )
    router.add_api_route(
        "/{record_id}",
        update_record,
        methods=["PATCH"],
        responses=update_responses,
        summary=f"Partially update a {spec.label.lower()}",
        name="patch_record",
    )

    @router.delete(
        "/{record_id}",
        responses={**NOT_FOUND_RESPONSE, 500: ERROR_RESPONSES[500]},
        summary=f"Delete a {spec.label.lower()}",
    )
    async def delete_record(
        record_id: str,
        service: ContentService = Depends(get_content_service),
    ) -> Dict[str, Any]:
        if not await service.collection(spec.name).delete(record_id):
            raise NotFoundError(resource=spec.label, key=record_id)
        return envelope({"id": record_id, "deleted": True})

    return router


def build_document_router(spec: CollectionSpec) -> APIRouter:
    router = APIRouter(prefix=f"/api/{spec.name}", tags=[spec.label])

    @router.get(
        "",
        responses={500: ERROR_RESPONSES[500]},
        summary=f"Get {spec.label.lower()}",
    )
    async def get_document(
        service: ContentService = Depends(get_content_service),
    ) -> Dict[str, Any]:
        document = await service.document(spec.name).get()
        return envelope(document.to_wire())

    async def update_document(
        payload: Dict[str, Any] = Body(...),
        service: ContentService = Depends(get_content_service),
    ) -> Dict[str, Any]:
        document = await service.document(spec.name).update(payload)
        return envelope(document.to_wire())

    for method in ("PUT", "PATCH"):
        router.add_api_route(
            "",
            update_document,
            methods=[method],
            responses=ERROR_RESPONSES,
            summary=f"Update {spec.label.lower()}",
            name=f"{method.lower()}_document",
        )

    return router


def build_content_routers() -> List[APIRouter]:
    return [
        build_document_router(spec) if spec.is_singleton else build_collection_router(spec)
        for spec in COLLECTIONS.values()
    ]
