"""
DoctorWeb Backend - Collection Registry
=========================================

What:  Declares every content collection the store knows about: its name,
       backing file, record schema, kind (list or singleton) and which fields
       the store manages.
How:   A frozen dataclass per collection, gathered in COLLECTIONS keyed by name.
       The store rejects names that are not registered, and the router factory
       builds one set of endpoints per entry.

On-disk layout (one file per collection under DATA_DIR):
    data/
    ├── pages.json          [ {...}, {...} ]
    ├── blog-posts.json     [ ... ]
    ├── ...
    └── seo-settings.json   { ... }            (singleton: a single object)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Type

from app.schemas.content import (
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

LIST = "list"
SINGLETON = "singleton"


@dataclass(frozen=True)
class CollectionSpec:
    """
    Static description of one collection.

    Attributes:
        name:           URL/collection name, e.g. "blog-posts"
        label:          Singular display name used in messages ("Blog post")
        schema:         Record model for typed access and payload checks
        kind:           LIST (array of records) or SINGLETON (one object)
        created_field:  Store-managed creation timestamp (None = not managed)
        updated_field:  Store-managed update timestamp (None = not managed)
        slug_route:     Whether GET /api/<name>/<slug> is exposed
        create_defaults: Values forced onto every new record
    """

    name: str
    label: str
    schema: Type[ContentRecord]
    kind: str = LIST
    created_field: Optional[str] = "createdAt"
    updated_field: Optional[str] = "updatedAt"
    slug_route: bool = False
    create_defaults: Mapping[str, Any] = field(default_factory=dict)

    @property
    def filename(self) -> str:
        return f"{self.name}.json"

    @property
    def is_singleton(self) -> bool:
        return self.kind == SINGLETON

    def empty_unit(self) -> Any:
        return {} if self.is_singleton else []


def _singleton(name: str, label: str, schema: Type[ContentRecord]) -> CollectionSpec:
    return CollectionSpec(
        name=name,
        label=label,
        schema=schema,
        kind=SINGLETON,
        created_field=None,
        updated_field=None,
    )


COLLECTIONS: Dict[str, CollectionSpec] = {
    spec.name: spec
    for spec in (
        CollectionSpec("pages", "Page", Page, slug_route=True),
        CollectionSpec(
            "blog-posts",
            "Blog post",
            BlogPost,
            created_field="publishedDate",
            updated_field="updatedDate",
            slug_route=True,
            create_defaults={"views": 0, "likes": 0},
        ),
        CollectionSpec("doctors", "Doctor", Doctor, slug_route=True),
        CollectionSpec("cases", "Case", CaseStudy, slug_route=True),
        CollectionSpec("services", "Service", Service),
        CollectionSpec("testimonials", "Testimonial", Testimonial),
        CollectionSpec("appointments", "Appointment", Appointment),
        CollectionSpec("categories", "Category", Category),
        CollectionSpec("skills", "Skill", Skill, slug_route=True),
        CollectionSpec("articles", "Article", Article, slug_route=True),
        _singleton("seo-settings", "SEO settings", SEOSettings),
        _singleton("contact", "Contact information", ContactInfo),
        _singleton("settings", "Settings", SiteSettings),
    )
}
