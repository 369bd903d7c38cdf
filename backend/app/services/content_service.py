"""
DoctorWeb Backend - Content Service (Typed Collection Accessors)
==================================================================

What:  Typed views over the DocumentStore, one per registered collection.
How:   CollectionAccessor[R] / DocumentAccessor[R] fix the collection name,
       check every create/update body against schema R BEFORE the store is
       called, and wrap every record coming out of the store into R.
       All persistence rules live in the store.
Who:   Built once by the app factory and handed to route handlers through
       the get_content_service dependency.

Usage:
    service = ContentService(store)
    doctors = await service.doctors.all()            # List[Doctor]
    page = await service.pages.get_by_slug("about")  # Optional[Page]
    seo = await service.seo_settings.get()           # SEOSettings
"""

import logging
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar

from pydantic import ValidationError as SchemaValidationError

from app.exceptions import StorageUnavailableError, UnknownCollectionError, ValidationError
from app.schemas.content import (
    ALIASES_ONLY,
    Appointment,
    Article,
    BlogPost,
    CaseStudy,
    Category,
    ContactInfo,
    ContentRecord,
    Doctor,
    Page,
    SEOSettings,
    Service,
    SiteSettings,
    Skill,
    Testimonial,
)
from app.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ContentRecord)


def check_input(
    schema: Type[ContentRecord], label: str, payload: Mapping[str, Any]
) -> Mapping[str, Any]:
    """
    Type-check a create/update body against the collection schema.

    Only the shape is checked; the body itself goes to the store as sent, so
    keys the schema does not know about are stored untouched. Known fields
    must use their camelCase names.
    """
    try:
        schema.model_validate(payload, context={ALIASES_ONLY: True})
    except SchemaValidationError as e:
        errors = [
            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in e.errors()
        ]
        raise ValidationError(message=f"Invalid {label.lower()} payload", errors=errors) from e
    return payload


def _validate(schema: Type[R], collection: str, record: Mapping[str, Any]) -> R:
    try:
        return schema.from_stored(record)
    except SchemaValidationError as e:
        logger.error(
            "Record %s in %s does not match %s: %s",
            record.get("id"),
            collection,
            schema.__name__,
            e.errors(include_url=False),
        )
        raise StorageUnavailableError(
            message=f"{collection} contains a record that does not match the {schema.__name__} schema",
            collection=collection,
            context={"record_id": record.get("id"), "error_count": e.error_count()},
        ) from e


class CollectionAccessor(Generic[R]):
    """Typed CRUD over one list collection."""

    def __init__(self, store: DocumentStore, collection: str, schema: Type[R]):
        self.store = store
        self.collection = collection
        self.schema = schema
        self.label = store.spec(collection).label

    def _wrap(self, record: Optional[Mapping[str, Any]]) -> Optional[R]:
        if record is None:
            return None
        return _validate(self.schema, self.collection, record)

    async def all(self) -> List[R]:
        records = await self.store.list(self.collection)
        return [_validate(self.schema, self.collection, r) for r in records]

    async def get_by_id(self, record_id: str) -> Optional[R]:
        return self._wrap(await self.store.get_by_id(self.collection, record_id))

    async def get_by_slug(self, slug: str) -> Optional[R]:
        return self._wrap(await self.store.get_by_slug(self.collection, slug))

    async def create(self, data: Mapping[str, Any]) -> R:
        check_input(self.schema, self.label, data)
        return _validate(self.schema, self.collection, await self.store.create(self.collection, data))

    async def update(self, record_id: str, changes: Mapping[str, Any]) -> Optional[R]:
        check_input(self.schema, self.label, changes)
        return self._wrap(await self.store.update(self.collection, record_id, changes))

    async def delete(self, record_id: str) -> bool:
        return await self.store.delete(self.collection, record_id)


class DocumentAccessor(Generic[R]):
    """Typed get/merge-update over one singleton document."""

    def __init__(self, store: DocumentStore, collection: str, schema: Type[R]):
        self.store = store
        self.collection = collection
        self.schema = schema
        self.label = store.spec(collection).label

    async def get(self) -> R:
        return _validate(self.schema, self.collection, await self.store.get_document(self.collection))

    async def update(self, changes: Mapping[str, Any]) -> R:
        check_input(self.schema, self.label, changes)
        document = await self.store.update_document(self.collection, changes)
        return _validate(self.schema, self.collection, document)


class ContentService:
    """
    Entry point for typed content access.

    Exposes one accessor attribute per collection, plus lookups by name for
    the generated routes and the aggregate snapshot.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

        self.pages: CollectionAccessor[Page] = CollectionAccessor(store, "pages", Page)
        self.blog_posts: CollectionAccessor[BlogPost] = CollectionAccessor(store, "blog-posts", BlogPost)
        self.doctors: CollectionAccessor[Doctor] = CollectionAccessor(store, "doctors", Doctor)
        self.cases: CollectionAccessor[CaseStudy] = CollectionAccessor(store, "cases", CaseStudy)
        self.services: CollectionAccessor[Service] = CollectionAccessor(store, "services", Service)
        self.testimonials: CollectionAccessor[Testimonial] = CollectionAccessor(
            store, "testimonials", Testimonial
        )
        self.appointments: CollectionAccessor[Appointment] = CollectionAccessor(
            store, "appointments", Appointment
        )
        self.categories: CollectionAccessor[Category] = CollectionAccessor(store, "categories", Category)
        self.skills: CollectionAccessor[Skill] = CollectionAccessor(store, "skills", Skill)
        self.articles: CollectionAccessor[Article] = CollectionAccessor(store, "articles", Article)

        self.seo_settings: DocumentAccessor[SEOSettings] = DocumentAccessor(
            store, "seo-settings", SEOSettings
        )
        self.contact: DocumentAccessor[ContactInfo] = DocumentAccessor(store, "contact", ContactInfo)
        self.site_settings: DocumentAccessor[SiteSettings] = DocumentAccessor(
            store, "settings", SiteSettings
        )

        self._collections: Dict[str, CollectionAccessor] = {
            a.collection: a
            for a in (
                self.pages,
                self.blog_posts,
                self.doctors,
                self.cases,
                self.services,
                self.testimonials,
                self.appointments,
                self.categories,
                self.skills,
                self.articles,
            )
        }
        self._documents: Dict[str, DocumentAccessor] = {
            a.collection: a for a in (self.seo_settings, self.contact, self.site_settings)
        }

    def collection(self, name: str) -> CollectionAccessor:
        accessor = self._collections.get(name)
        if accessor is None:
            self.store.spec(name)  # unregistered names raise here
            raise UnknownCollectionError(name, context={"reason": "not a list collection"})
        return accessor

    def document(self, name: str) -> DocumentAccessor:
        accessor = self._documents.get(name)
        if accessor is None:
            self.store.spec(name)
            raise UnknownCollectionError(name, context={"reason": "not a singleton document"})
        return accessor

    async def snapshot(self) -> Dict[str, Any]:
        return await self.store.snapshot_all()
