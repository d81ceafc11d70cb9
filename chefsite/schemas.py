"""Pydantic schemas for the content entities.

Each entity has a ``Create`` payload, an ``Update`` payload whose fields are
all optional (only fields explicitly set are written), and an ``Out`` model
that repositories return and fixtures are declared with.
"""

import datetime as dt
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field, model_validator

HEX_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"

Difficulty = Literal["easy", "medium", "hard"]
ContactType = Literal["general", "booking"]
SubmissionType = Literal["contact", "gift-certificate"]


class Coordinates(BaseModel):
    """Map position of an event. Both values are always present together."""

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class EventCategoryCreate(BaseModel):
    """Payload for creating a category. ``slug`` defaults to one built from ``name``."""

    name: str = Field(min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR)


class EventCategoryUpdate(BaseModel):
    """Schema for updating a category (all fields optional)."""

    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR)


class EventCategoryOut(BaseModel):
    """Schema for returning a category."""

    id: str
    name: str
    slug: str
    description: Optional[str] = None
    color: Optional[str] = None

    class Config:
        from_attributes = True


class EventBase(BaseModel):
    """Shared fields for event schemas."""

    title: str = Field(min_length=1)
    description: str = ""
    date: dt.date
    time: Optional[str] = None
    location: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    featured_image: str = ""
    gallery_images: Optional[list[str]] = None
    category_id: Optional[str] = None


class EventCreate(EventBase):
    """Schema for creating a new event."""

    pass


class EventUpdate(BaseModel):
    """
    Schema for updating an event (all fields optional).

    Setting ``coordinates`` to ``None`` clears both latitude and longitude.
    """

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[str] = None
    location: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    featured_image: Optional[str] = None
    gallery_images: Optional[list[str]] = None
    category_id: Optional[str] = None


class EventOut(EventBase):
    """Schema for returning an event with its category."""

    id: str
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None
    category: Optional[EventCategoryOut] = None

    class Config:
        from_attributes = True


class UserBase(BaseModel):
    """Shared fields for user schemas."""

    full_name: str = Field(min_length=1)
    email: EmailStr
    address: Optional[str] = None
    subscribe_newsletter: bool = False


class UserCreate(UserBase):
    """Payload for creating or saving a user."""

    last_contacted_date: Optional[dt.datetime] = None
    last_contacted_event_id: Optional[str] = None
    last_contacted_event_name: Optional[str] = None


class UserUpdate(BaseModel):
    """Schema for updating a user (all fields optional)."""

    full_name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    subscribe_newsletter: Optional[bool] = None
    last_contacted_date: Optional[dt.datetime] = None
    last_contacted_event_id: Optional[str] = None
    last_contacted_event_name: Optional[str] = None


class UserOut(BaseModel):
    """Response schema for user data."""

    id: str
    full_name: str
    email: str
    address: Optional[str] = None
    subscribe_newsletter: bool = False
    signup_date: dt.datetime
    last_contacted_date: Optional[dt.datetime] = None
    last_contacted_event_id: Optional[str] = None
    last_contacted_event_name: Optional[str] = None

    class Config:
        from_attributes = True


class MarkContactedRequest(BaseModel):
    """Payload for recording that users were told about an event."""

    user_ids: list[str]
    event_id: str
    event_name: str


class ContactSubmissionCreate(BaseModel):
    """Contact form payload."""

    type: Literal["contact"] = "contact"
    name: str = Field(min_length=1)
    email: EmailStr
    message: str = ""
    contact_type: Optional[ContactType] = None
    event_date: Optional[dt.date] = None
    guests: Optional[str] = None
    service_type: Optional[str] = None
    timestamp: Optional[dt.datetime] = None


class GiftCertificateSubmissionCreate(BaseModel):
    """Gift certificate form payload."""

    type: Literal["gift-certificate"] = "gift-certificate"
    name: str = Field(min_length=1)
    email: EmailStr
    message: Optional[str] = None
    amount: Optional[str] = None
    custom_amount: Optional[str] = None
    recipient_name: str
    recipient_email: EmailStr
    payment_app_username: str
    timestamp: Optional[dt.datetime] = None

    @model_validator(mode="after")
    def check_amount(self):
        if self.amount is None and self.custom_amount is None:
            raise ValueError("amount or custom_amount is required")
        return self


class GiftCertificateImport(GiftCertificateSubmissionCreate):
    """
    Gift certificate request read from a local-storage export.

    Older records may lack the recipient details or an amount; they are kept
    with blank values instead of being rejected.
    """

    recipient_name: str = ""
    recipient_email: str = ""
    payment_app_username: str = ""

    @model_validator(mode="after")
    def check_amount(self):
        return self


FormSubmissionCreate = Annotated[
    Union[ContactSubmissionCreate, GiftCertificateSubmissionCreate],
    Field(discriminator="type"),
]

ImportedSubmission = Annotated[
    Union[ContactSubmissionCreate, GiftCertificateImport],
    Field(discriminator="type"),
]


class FormSubmissionUpdate(BaseModel):
    """
    Schema for updating a submission.

    ``is_processed`` is changed through ``set_processed`` only, which applies
    to gift certificate requests.
    """

    message: Optional[str] = None


class FormSubmissionOut(BaseModel):
    """Schema for returning a submission of either type."""

    id: str
    type: SubmissionType
    timestamp: dt.datetime
    name: str
    email: str
    message: Optional[str] = None
    contact_type: Optional[ContactType] = None
    event_date: Optional[dt.date] = None
    guests: Optional[str] = None
    service_type: Optional[str] = None
    amount: Optional[str] = None
    custom_amount: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_email: Optional[str] = None
    payment_app_username: Optional[str] = None
    is_processed: bool = False

    class Config:
        from_attributes = True


class RecipeBase(BaseModel):
    """Shared fields for recipe schemas. Times are in minutes."""

    title: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    featured_image: str = ""
    description: str = ""
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    prep_time: int = Field(0, ge=0)
    cook_time: int = Field(0, ge=0)
    servings: int = Field(1, ge=1)
    cuisine: Optional[str] = None
    difficulty: Difficulty = "medium"
    tags: list[str] = Field(default_factory=list)
    featured: bool = False


class RecipeCreate(RecipeBase):
    """Schema for creating a recipe. ``published_date`` defaults to now."""

    published_date: Optional[dt.datetime] = None


class RecipeUpdate(BaseModel):
    """Schema for updating a recipe (all fields optional)."""

    title: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = Field(None, min_length=1)
    featured_image: Optional[str] = None
    description: Optional[str] = None
    ingredients: Optional[list[str]] = None
    instructions: Optional[list[str]] = None
    prep_time: Optional[int] = Field(None, ge=0)
    cook_time: Optional[int] = Field(None, ge=0)
    servings: Optional[int] = Field(None, ge=1)
    cuisine: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    tags: Optional[list[str]] = None
    featured: Optional[bool] = None


class RecipeOut(RecipeBase):
    """Schema for returning a recipe."""

    id: str
    published_date: dt.datetime

    class Config:
        from_attributes = True


class BlogPostBase(BaseModel):
    """Shared fields for blog post schemas."""

    title: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    featured_image: str = ""
    excerpt: Optional[str] = None
    content: str
    tags: list[str] = Field(default_factory=list)
    category: Optional[str] = None
    featured: bool = False


class BlogPostCreate(BlogPostBase):
    """Schema for creating a blog post. ``published_date`` defaults to now."""

    published_date: Optional[dt.datetime] = None


class BlogPostUpdate(BaseModel):
    """Schema for updating a blog post (all fields optional)."""

    title: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = Field(None, min_length=1)
    featured_image: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[list[str]] = None
    category: Optional[str] = None
    featured: Optional[bool] = None


class BlogPostOut(BlogPostBase):
    """Schema for returning a blog post."""

    id: str
    published_date: dt.datetime

    class Config:
        from_attributes = True


class TestimonialCreate(BaseModel):
    """Schema for creating a testimonial."""

    name: str = Field(min_length=1)
    text: str = Field(min_length=1)


class TestimonialUpdate(BaseModel):
    """Schema for updating a testimonial (all fields optional)."""

    name: Optional[str] = Field(None, min_length=1)
    text: Optional[str] = Field(None, min_length=1)


class TestimonialOut(TestimonialCreate):
    """Schema for returning a testimonial."""

    id: str
    created_at: dt.datetime

    class Config:
        from_attributes = True


class DatabaseStats(BaseModel):
    """Row counts shown on the admin dashboard."""

    users: int = 0
    events: int = 0
    form_submissions: int = 0
    recipes: int = 0
    blog_posts: int = 0
