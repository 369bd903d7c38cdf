"""
DoctorWeb Backend - Content Record Schemas
============================================

What:  Pydantic models describing the record shape of every collection.
How:   Python attributes are snake_case; the JSON files and the API use
       camelCase, mapped through an alias generator. Unknown keys are kept
       (extra="allow") so a record survives read → write without losing fields.
Who:   Used by the typed accessors in content_service, which check request
       bodies before writing and wrap stored records after reading.

Every field is optional: the store copies caller-supplied fields verbatim and
never fills required fields on its own, so a record written with only
{name, slug} must still read back cleanly, and a stored null is accepted
wherever a value is. Types are still checked (rating must be a number,
status one of the known values, ...).

Request bodies are validated with the ALIASES_ONLY context: a snake_case
field name such as "profile_image" is rejected instead of being stored as an
unknown key next to "profileImage".
"""

import copy
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationInfo, model_validator
from pydantic.alias_generators import to_camel


PublishStatus = Literal["published", "draft", "archived"]

# Validation context key: only camelCase keys may name known fields
ALIASES_ONLY = "aliases_only"


class ContentModel(BaseModel):
    """Base for every record and embedded sub-object."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        extra="allow",
    )

    @model_validator(mode="before")
    @classmethod
    def reject_field_names(cls, data: Any, info: ValidationInfo) -> Any:
        if not (info.context and info.context.get(ALIASES_ONLY)) or not isinstance(data, dict):
            return data
        misnamed = [
            name
            for name, field in cls.model_fields.items()
            if field.alias and field.alias != name and name in data
        ]
        if misnamed:
            hints = ", ".join(f"'{cls.model_fields[n].alias}' instead of '{n}'" for n in misnamed)
            raise ValueError(f"use camelCase keys: {hints}")
        return data

    def to_wire(self) -> Dict[str, Any]:
        """
        Serialize to the on-disk/API form.

        exclude_unset keeps the output to the keys that were actually present,
        so defaults declared here never leak into responses.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class ContentRecord(ContentModel):
    """A collection member. `id` is assigned by the store on create."""

    id: Optional[str] = None

    _stored: Optional[Dict[str, Any]] = PrivateAttr(default=None)

    @classmethod
    def from_stored(cls, record: Mapping[str, Any]) -> "ContentRecord":
        """Validate a stored record and remember it verbatim for to_wire()."""
        model = cls.model_validate(record)
        model._stored = copy.deepcopy(dict(record))
        return model

    def to_wire(self) -> Dict[str, Any]:
        # Stored records go out exactly as read: validation may coerce
        # values (5 → 5.0 for a float field) and the file must not drift
        if self._stored is not None:
            return copy.deepcopy(self._stored)
        return super().to_wire()


# ══════════════════════════════════════════════════════════════════════════
# Embedded sub-objects (no identity of their own)
# ══════════════════════════════════════════════════════════════════════════


class SEOMetadata(ContentModel):
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: Optional[List[str]] = None
    author: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    og_url: Optional[str] = None
    og_type: Optional[Literal["website", "article", "profile"]] = None
    twitter_card: Optional[Literal["summary", "summary_large_image", "app", "player"]] = None
    twitter_title: Optional[str] = None
    twitter_description: Optional[str] = None
    twitter_image: Optional[str] = None
    canonical_url: Optional[str] = None
    structured_data: Optional[Any] = None


class PageComponent(ContentModel):
    id: Optional[str] = None
    type: Optional[Literal["hero", "services", "testimonials", "contact", "gallery"]] = None
    data: Optional[Any] = None
    order: Optional[int] = None


class SocialLinks(ContentModel):
    twitter: Optional[str] = None
    linkedin: Optional[str] = None
    website: Optional[str] = None
    facebook: Optional[str] = None


class BlogAuthor(ContentModel):
    id: Optional[str] = None
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    title: Optional[str] = None
    email: Optional[str] = None
    social: Optional[SocialLinks] = None


class BlogCategory(ContentModel):
    id: Optional[str] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    seo: Optional[SEOMetadata] = None


class TimeSlot(ContentModel):
    start: str
    end: str


class DoctorAvailability(ContentModel):
    monday: Optional[List[TimeSlot]] = None
    tuesday: Optional[List[TimeSlot]] = None
    wednesday: Optional[List[TimeSlot]] = None
    thursday: Optional[List[TimeSlot]] = None
    friday: Optional[List[TimeSlot]] = None
    saturday: Optional[List[TimeSlot]] = None
    sunday: Optional[List[TimeSlot]] = None


class DoctorContact(ContentModel):
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    clinic_name: Optional[str] = None
    social: Optional[SocialLinks] = None


# ══════════════════════════════════════════════════════════════════════════
# Collection records
# ══════════════════════════════════════════════════════════════════════════


class Page(ContentRecord):
    slug: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    template: Optional[Literal["home", "about", "contact", "services", "custom"]] = None
    status: Optional[PublishStatus] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    seo: Optional[SEOMetadata] = None
    components: Optional[List[PageComponent]] = None


class BlogPost(ContentRecord):
    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    featured_image: Optional[str] = None
    author: Optional[BlogAuthor] = None
    published_date: Optional[str] = None
    updated_date: Optional[str] = None
    categories: Optional[List[BlogCategory]] = None
    tags: Optional[List[str]] = None
    read_time: Optional[int] = None
    status: Optional[PublishStatus] = None
    views: Optional[int] = 0
    likes: Optional[int] = 0
    seo: Optional[SEOMetadata] = None


class Doctor(ContentRecord):
    name: Optional[str] = None
    bio: Optional[str] = None
    slug: Optional[str] = None
    title: Optional[str] = None
    specialization: Optional[List[str]] = None
    experience: Optional[int] = None
    education: Optional[List[str]] = None
    about: Optional[str] = None
    profile_image: Optional[str] = None
    rating: Optional[float] = None
    total_reviews: Optional[int] = None
    availability: Optional[DoctorAvailability] = None
    contact: Optional[DoctorContact] = None
    languages: Optional[List[str]] = None
    certifications: Optional[List[str]] = None
    awards: Optional[List[str]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    seo: Optional[SEOMetadata] = None


class CaseStudy(ContentRecord):
    name: Optional[str] = None
    title: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    full_description: Optional[str] = None
    profile_image: Optional[str] = None
    specialization: Optional[List[str]] = None
    symptoms: Optional[List[str]] = None
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    outcome: Optional[str] = None
    before_image: Optional[str] = None
    after_image: Optional[str] = None
    patient_age: Optional[int] = None
    patient_gender: Optional[Literal["male", "female", "other"]] = None
    procedure_date: Optional[str] = None
    follow_up_date: Optional[str] = None
    status: Optional[PublishStatus] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    seo: Optional[SEOMetadata] = None


# The following collections have no fixed contract with the frontend; their shapes are
# taken from the sample data and kept loose.


class Service(ContentRecord):
    slug: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    image: Optional[str] = None
    features: Optional[List[str]] = None
    order: Optional[int] = None


class Testimonial(ContentRecord):
    name: Optional[str] = None
    role: Optional[str] = None
    content: Optional[str] = None
    rating: Optional[float] = None
    avatar: Optional[str] = None
    doctor_id: Optional[str] = None


class Appointment(ContentRecord):
    patient_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    doctor_id: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    reason: Optional[str] = None
    status: Optional[Literal["pending", "confirmed", "cancelled", "completed"]] = None


class Category(ContentRecord):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    seo: Optional[SEOMetadata] = None


class Skill(ContentRecord):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    level: Optional[int] = None
    category: Optional[str] = None
    seo: Optional[SEOMetadata] = None


class Article(ContentRecord):
    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    image: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[PublishStatus] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    seo: Optional[SEOMetadata] = None


# ══════════════════════════════════════════════════════════════════════════
# Singleton documents
# ══════════════════════════════════════════════════════════════════════════


class SchemaMarkup(ContentModel):
    organization: Optional[Any] = None
    medical_business: Optional[Any] = None
    person: Optional[Any] = None


class SEOSettings(ContentRecord):
    site_name: Optional[str] = None
    site_description: Optional[str] = None
    site_keywords: Optional[List[str]] = None
    site_author: Optional[str] = None
    site_url: Optional[str] = None
    default_og_image: Optional[str] = None
    default_twitter_image: Optional[str] = None
    google_analytics_id: Optional[str] = None
    google_tag_manager_id: Optional[str] = None
    facebook_pixel_id: Optional[str] = None
    twitter_username: Optional[str] = None
    facebook_page_id: Optional[str] = None
    linkedin_company_id: Optional[str] = None
    schema_markup: Optional[SchemaMarkup] = None


class ContactInfo(ContentRecord):
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    clinic_name: Optional[str] = None
    opening_hours: Optional[Any] = None
    map_url: Optional[str] = None
    social: Optional[SocialLinks] = None


class SiteSettings(ContentRecord):
    site_name: Optional[str] = None
    logo: Optional[str] = None
    favicon: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    maintenance_mode: Optional[bool] = None
