"""Repository for client testimonials."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import execute, read, write
from ..result import Result
from .base import apply_update, build_changeset, delete_by_id, require_changes

ENTITY = "testimonial"


def get_all(db: Session | None) -> Result[list[schemas.TestimonialOut]]:
    """Retrieve all testimonials, newest first."""

    def run(session: Session):
        stmt = select(models.Testimonial).order_by(models.Testimonial.created_at.desc())
        return [
            schemas.TestimonialOut.model_validate(t)
            for t in execute(session, stmt).scalars().all()
        ]

    return read(db, "fetch testimonials", run)


def get_by_id(db: Session | None, testimonial_id: str) -> Result[schemas.TestimonialOut | None]:
    def run(session: Session):
        testimonial = session.get(models.Testimonial, testimonial_id)
        return schemas.TestimonialOut.model_validate(testimonial) if testimonial else None

    return read(db, "fetch testimonial", run)


def create(db: Session | None, testimonial_in: schemas.TestimonialCreate) -> schemas.TestimonialOut:
    def run(session: Session):
        testimonial = models.Testimonial(**testimonial_in.model_dump())
        session.add(testimonial)
        session.commit()
        session.refresh(testimonial)
        return schemas.TestimonialOut.model_validate(testimonial)

    return write(db, "create testimonial", run)


def update(
    db: Session | None, testimonial_id: str, changes: schemas.TestimonialUpdate
) -> schemas.TestimonialOut | None:
    """
    Partially update a testimonial.

    Raises:
        NothingToUpdateError: If ``changes`` has no fields set.
    """
    pairs = require_changes(ENTITY, build_changeset(models.Testimonial, changes))

    def run(session: Session):
        if not apply_update(session, models.Testimonial, ENTITY, testimonial_id, pairs):
            return None
        return schemas.TestimonialOut.model_validate(session.get(models.Testimonial, testimonial_id))

    return write(db, "update testimonial", run)


def delete(db: Session | None, testimonial_id: str) -> bool:
    return write(
        db,
        "delete testimonial",
        lambda session: delete_by_id(session, models.Testimonial, testimonial_id),
    )
