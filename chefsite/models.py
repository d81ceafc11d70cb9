"""Database models for the chef site content layer.

This module defines SQLAlchemy ORM models used by the repositories. All
primary keys are UUID strings generated by the application. List-valued
columns use the portable ``JSON`` type.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base


def new_id() -> str:
    """Generate a primary key value."""
    return str(uuid4())


def utcnow() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


class EventCategory(Base):
    """
    SQLAlchemy model representing an event category.

    Deleting a category does not delete its events; the repository nulls
    ``Event.category_id`` first.
    """

    __tablename__ = "event_categories"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    slug = Column(String(120), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(7), nullable=True)

    #: Events assigned to the category
    events = relationship("Event", back_populates="category")


class Event(Base):
    """
    SQLAlchemy model representing an event shown on the site.

    Coordinates are stored as two nullable columns and exposed as a pair
    through :attr:`coordinates`.
    """

    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    date = Column(Date, nullable=False, index=True)
    time = Column(String(50), nullable=True)
    location = Column(String(255), nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    featured_image = Column(String(500), nullable=False, default="")
    gallery_images = Column(JSON, nullable=True)
    category_id = Column(
        String(36),
        ForeignKey("event_categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    #: Category the event belongs to, if any
    category = relationship("EventCategory", back_populates="events")

    @property
    def coordinates(self) -> dict[str, float] | None:
        if self.lat is None or self.lng is None:
            return None
        return {"lat": self.lat, "lng": self.lng}


class User(Base):
    """
    SQLAlchemy model representing a site visitor who signed up.

    Email is the natural key used by the upsert in ``crud.users.save``.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    full_name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    address = Column(String(500), nullable=True)
    subscribe_newsletter = Column(Boolean, default=False, nullable=False)
    signup_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_contacted_date = Column(DateTime(timezone=True), nullable=True)
    last_contacted_event_id = Column(String(36), nullable=True)
    last_contacted_event_name = Column(String(200), nullable=True)


class FormSubmission(Base):
    """
    SQLAlchemy model representing a contact or gift certificate submission.

    Only the column group matching ``type`` is populated.
    """

    __tablename__ = "form_submissions"

    id = Column(String(36), primary_key=True, default=new_id)
    type = Column(String(20), nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False)
    message = Column(Text, nullable=True)

    # contact
    contact_type = Column(String(20), nullable=True)
    event_date = Column(Date, nullable=True)
    guests = Column(String(50), nullable=True)
    service_type = Column(String(100), nullable=True)

    # gift-certificate
    amount = Column(String(50), nullable=True)
    custom_amount = Column(String(50), nullable=True)
    recipient_name = Column(String(200), nullable=True)
    recipient_email = Column(String(255), nullable=True)
    payment_app_username = Column(String(200), nullable=True)
    is_processed = Column(Boolean, default=False, nullable=False)


class Recipe(Base):
    """SQLAlchemy model representing a published recipe."""

    __tablename__ = "recipes"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(200), nullable=False)
    slug = Column(String(200), unique=True, index=True, nullable=False)
    featured_image = Column(String(500), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    ingredients = Column(JSON, nullable=False, default=list)
    instructions = Column(JSON, nullable=False, default=list)
    prep_time = Column(Integer, nullable=False, default=0)
    cook_time = Column(Integer, nullable=False, default=0)
    servings = Column(Integer, nullable=False, default=1)
    cuisine = Column(String(100), nullable=True)
    difficulty = Column(String(10), nullable=False, default="medium")
    tags = Column(JSON, nullable=False, default=list)
    published_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    featured = Column(Boolean, nullable=False, default=False)


class BlogPost(Base):
    """SQLAlchemy model representing a blog post."""

    __tablename__ = "blog_posts"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(200), nullable=False)
    slug = Column(String(200), unique=True, index=True, nullable=False)
    featured_image = Column(String(500), nullable=False, default="")
    excerpt = Column(Text, nullable=True)
    content = Column(Text, nullable=False)
    published_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    tags = Column(JSON, nullable=False, default=list)
    category = Column(String(100), nullable=True, index=True)
    featured = Column(Boolean, nullable=False, default=False)


class Testimonial(Base):
    """SQLAlchemy model representing a client testimonial."""

    __tablename__ = "testimonials"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class SiteSettingsRow(Base):
    """
    Key/value row holding the site settings blob.

    A deployment has a single row keyed ``site_settings``.
    """

    __tablename__ = "site_settings"

    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
