"""Repository for event categories."""

from sqlalchemy import select
from sqlalchemy import update as sql_update
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import execute, read, write
from ..result import Result
from .base import apply_update, build_changeset, delete_by_id, require_changes, slugify

ENTITY = "event category"


def get_all(db: Session | None) -> Result[list[schemas.EventCategoryOut]]:
    """Retrieve all categories ordered by name."""

    def run(session: Session):
        stmt = select(models.EventCategory).order_by(models.EventCategory.name.asc())
        return [
            schemas.EventCategoryOut.model_validate(c)
            for c in execute(session, stmt).scalars().all()
        ]

    return read(db, "fetch event categories", run)


def get_by_id(db: Session | None, category_id: str) -> Result[schemas.EventCategoryOut | None]:
    """Retrieve a category by id, ``Ok(None)`` when missing."""

    def run(session: Session):
        category = session.get(models.EventCategory, category_id)
        return schemas.EventCategoryOut.model_validate(category) if category else None

    return read(db, "fetch event category", run)


def get_by_slug(db: Session | None, slug: str) -> Result[schemas.EventCategoryOut | None]:
    """Retrieve a category by slug, ``Ok(None)`` when missing."""

    def run(session: Session):
        stmt = select(models.EventCategory).where(models.EventCategory.slug == slug)
        category = execute(session, stmt).scalar_one_or_none()
        return schemas.EventCategoryOut.model_validate(category) if category else None

    return read(db, "fetch event category by slug", run)


def create(db: Session | None, category_in: schemas.EventCategoryCreate) -> schemas.EventCategoryOut:
    """
    Create a category.

    The slug is built from the name unless one is supplied. Uniqueness is
    enforced by the store.
    """

    def run(session: Session):
        category = models.EventCategory(
            name=category_in.name,
            slug=category_in.slug or slugify(category_in.name),
            description=category_in.description,
            color=category_in.color,
        )
        session.add(category)
        session.commit()
        session.refresh(category)
        return schemas.EventCategoryOut.model_validate(category)

    return write(db, "create event category", run)


def update(
    db: Session | None, category_id: str, changes: schemas.EventCategoryUpdate
) -> schemas.EventCategoryOut | None:
    """
    Partially update a category.

    Raises:
        NothingToUpdateError: If ``changes`` has no fields set.
    """
    pairs = require_changes(ENTITY, build_changeset(models.EventCategory, changes))

    def run(session: Session):
        if not apply_update(session, models.EventCategory, ENTITY, category_id, pairs):
            return None
        category = session.get(models.EventCategory, category_id)
        return schemas.EventCategoryOut.model_validate(category)

    return write(db, "update event category", run)


def delete(db: Session | None, category_id: str) -> bool:
    """
    Delete a category after detaching its events.

    Referencing events get ``category_id = NULL`` first; the two statements
    are committed separately.
    """

    def run(session: Session):
        execute(
            session,
            sql_update(models.Event)
            .where(models.Event.category_id == category_id)
            .values(category_id=None),
            retry=False,
        )
        session.commit()
        return delete_by_id(session, models.EventCategory, category_id)

    return write(db, "delete event category", run)
