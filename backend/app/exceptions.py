"""
DoctorWeb Backend - Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the content store and API layer.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the uniform {success: false, error, message} envelope.
Who:   Raised by the document store, content service and route handlers.

Exception Hierarchy:
    DoctorWebError (base)
    ├── ValidationError          → 400 Bad Request
    ├── NotFoundError            → 404 Not Found
    ├── UnknownCollectionError   → 404 Not Found
    ├── DuplicateSlugError       → 409 Conflict
    ├── StorageUnavailableError  → 500 (collection file missing/unreadable/malformed)
    └── StorageWriteError        → 500 (collection file could not be replaced)

A missing record is NOT an exception inside the store: lookups return None and
delete returns False. Route handlers turn those outcomes into NotFoundError.
"""

from typing import Any, Dict, List, Optional


class DoctorWebError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description
        context:  Additional debug info (logged but NOT returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(DoctorWebError):
    """
    Raised when a request body does not fit the collection's record schema.

    HTTP: 400 Bad Request

    Example response:
        {
            "success": false,
            "error": "validation_error",
            "message": "Invalid doctor payload",
            "details": {"errors": [{"loc": ["rating"], "msg": "..."}]}
        }

    `errors` is the client-facing list returned as details.errors; `context`
    stays server-side like every other DoctorWebError.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = errors or []


class NotFoundError(DoctorWebError):
    """
    Raised by the HTTP layer when a lookup by id or slug comes back empty.

    HTTP: 404 Not Found. The message follows the "<Label> not found" wording
    the website frontend already matches on (e.g. "Doctor not found").
    """

    def __init__(
        self,
        resource: str = "Resource",
        key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if key:
            ctx["key"] = key
        super().__init__(message=f"{resource} not found", context=ctx)
        self.resource = resource


class UnknownCollectionError(DoctorWebError):
    """Raised when a collection name is not in the registry."""

    def __init__(self, collection: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["collection"] = collection
        super().__init__(message=f"Unknown collection '{collection}'", context=ctx)
        self.collection = collection


class DuplicateSlugError(DoctorWebError):
    """
    Raised on create/update when the slug already belongs to another record.

    HTTP: 409 Conflict. Only raised while ENFORCE_UNIQUE_SLUGS is enabled.
    """

    def __init__(
        self,
        collection: str,
        slug: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx.update({"collection": collection, "slug": slug})
        super().__init__(
            message=f"Slug '{slug}' is already used in {collection}",
            context=ctx,
        )
        self.collection = collection
        self.slug = slug


class StorageUnavailableError(DoctorWebError):
    """
    Raised when a collection's backing file cannot be read or parsed.

    When:    File missing, permission denied, invalid JSON, wrong top-level
             shape, or records that do not match the collection schema.
    HTTP:    500 Internal Server Error

    No partial results are ever returned alongside this error.
    """

    def __init__(
        self,
        message: str = "Content storage is unavailable",
        collection: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if collection:
            ctx["collection"] = collection
        super().__init__(message=message, context=ctx)
        self.collection = collection


class StorageWriteError(DoctorWebError):
    """
    Raised when the merged collection could not be written back.

    HTTP:    500 Internal Server Error
    State:   The previous file content is left in place; there is no retry.
    """

    def __init__(
        self,
        message: str = "Failed to save content",
        collection: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if collection:
            ctx["collection"] = collection
        super().__init__(message=message, context=ctx)
        self.collection = collection
