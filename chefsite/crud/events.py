"""Repository for events.

Reads return a :class:`~chefsite.result.Result`; writes raise on failure.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from ..database import execute, read, write
from ..models import utcnow
from ..result import Result
from .base import apply_update, build_changeset, delete_by_id, require_changes

ENTITY = "event"


def _to_out(event: models.Event) -> schemas.EventOut:
    return schemas.EventOut.model_validate(event)


def _select():
    return select(models.Event).options(selectinload(models.Event.category))


def get_all(db: Session | None) -> Result[list[schemas.EventOut]]:
    """
    Retrieve every event, most recent date first.

    Args:
        db (Session | None): Database session.

    Returns:
        Result[list[EventOut]]: Events, or the error that prevented reading.
    """

    def run(session: Session):
        stmt = _select().order_by(models.Event.date.desc())
        return [_to_out(e) for e in execute(session, stmt).scalars().all()]

    return read(db, "fetch events", run)


def get_upcoming(
    db: Session | None, limit: int = 3, today: date | None = None
) -> Result[list[schemas.EventOut]]:
    """
    Retrieve events dated today or later, soonest first.

    Args:
        db (Session | None): Database session.
        limit (int): Maximum number of events.
        today (date | None): Reference day, defaults to the current UTC date.

    Returns:
        Result[list[EventOut]]: Upcoming events.
    """
    today = today or utcnow().date()

    def run(session: Session):
        stmt = (
            _select()
            .where(models.Event.date >= today)
            .order_by(models.Event.date.asc())
            .limit(limit)
        )
        return [_to_out(e) for e in execute(session, stmt).scalars().all()]

    return read(db, "fetch upcoming events", run)


def get_by_category(db: Session | None, category_id: str) -> Result[list[schemas.EventOut]]:
    """Retrieve events of one category, most recent date first."""

    def run(session: Session):
        stmt = (
            _select()
            .where(models.Event.category_id == category_id)
            .order_by(models.Event.date.desc())
        )
        return [_to_out(e) for e in execute(session, stmt).scalars().all()]

    return read(db, "fetch events by category", run)


def get_by_id(db: Session | None, event_id: str) -> Result[schemas.EventOut | None]:
    """
    Retrieve a single event together with its category.

    Returns:
        Result[EventOut | None]: ``Ok(None)`` when the event does not exist.
    """

    def run(session: Session):
        stmt = _select().where(models.Event.id == event_id)
        event = execute(session, stmt).scalar_one_or_none()
        return _to_out(event) if event else None

    return read(db, "fetch event", run)


def create(db: Session | None, event_in: schemas.EventCreate, event_id: str | None = None) -> schemas.EventOut:
    """
    Create and persist a new event.

    Args:
        db (Session | None): Database session.
        event_in (EventCreate): Event data.
        event_id (str | None): Explicit id, used when importing records.

    Returns:
        EventOut: Newly created event.
    """

    def run(session: Session):
        data = event_in.model_dump(exclude={"coordinates"})
        coords = event_in.coordinates
        now = utcnow()
        event = models.Event(
            **data,
            lat=coords.lat if coords else None,
            lng=coords.lng if coords else None,
            created_at=now,
            updated_at=now,
        )
        if event_id:
            event.id = event_id
        session.add(event)
        session.commit()
        session.refresh(event)
        return _to_out(event)

    return write(db, "create event", run)


def update(db: Session | None, event_id: str, changes: schemas.EventUpdate) -> schemas.EventOut | None:
    """
    Partially update an event.

    Only fields explicitly set on ``changes`` are written. ``coordinates``
    updates both columns at once; ``updated_at`` is always stamped.

    Raises:
        NothingToUpdateError: If ``changes`` has no fields set.

    Returns:
        EventOut | None: Updated event, ``None`` if it does not exist.
    """
    pairs = build_changeset(models.Event, changes, skip={"coordinates"})
    if "coordinates" in changes.model_fields_set:
        coords = changes.coordinates
        pairs.append((models.Event.__table__.c.lat, coords.lat if coords else None))
        pairs.append((models.Event.__table__.c.lng, coords.lng if coords else None))
    require_changes(ENTITY, pairs)
    pairs.append((models.Event.__table__.c.updated_at, utcnow()))

    def run(session: Session):
        if not apply_update(session, models.Event, ENTITY, event_id, pairs):
            return None
        event = execute(session, _select().where(models.Event.id == event_id)).scalar_one()
        return _to_out(event)

    return write(db, "update event", run)


def delete(db: Session | None, event_id: str) -> bool:
    """Delete an event. Returns whether a row was removed."""
    return write(db, "delete event", lambda session: delete_by_id(session, models.Event, event_id))
