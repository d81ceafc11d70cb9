"""Event and event category routes.

Listings and lookups fall back to the static fixtures when the database
cannot be read; writes report failures through the registered exception
handlers.
"""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from . import fixtures, schemas
from .crud import event_categories as crud_categories
from .crud import events as crud_events
from .database import get_db
from .event_calendar import (
    calendar_filename,
    google_calendar_url,
    icalendar_file,
    outlook_calendar_url,
)
from .models import utcnow

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/categories", response_model=List[schemas.EventCategoryOut])
def list_categories(db: Session = Depends(get_db)):
    """
    Retrieve all event categories ordered by name.

    Returns:
        list[EventCategoryOut]: Categories, or the fixture categories when
        the database cannot be read.
    """
    return crud_categories.get_all(db).unwrap_or(fixtures.EVENT_CATEGORIES)


@router.post("/categories", response_model=schemas.EventCategoryOut, status_code=201)
def create_category(category_in: schemas.EventCategoryCreate, db: Session = Depends(get_db)):
    """
    Create an event category.

    Args:
        category_in (EventCategoryCreate): Category data; the slug defaults
            to one built from the name.
        db (Session): Database session.

    Returns:
        EventCategoryOut: Created category.
    """
    return crud_categories.create(db, category_in)


@router.get("/categories/{category_id}", response_model=schemas.EventCategoryOut)
def get_category(category_id: str, db: Session = Depends(get_db)):
    category = crud_categories.get_by_id(db, category_id).unwrap_or_else(
        lambda error: fixtures.find_by_id(fixtures.EVENT_CATEGORIES, category_id)
    )
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.patch("/categories/{category_id}", response_model=schemas.EventCategoryOut)
def patch_category(
    category_id: str,
    changes: schemas.EventCategoryUpdate,
    db: Session = Depends(get_db),
):
    """
    Partially update a category.

    Raises:
        HTTPException: If the category does not exist.
    """
    category = crud_categories.update(db, category_id, changes)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.delete("/categories/{category_id}")
def remove_category(category_id: str, db: Session = Depends(get_db)):
    """
    Delete a category. Its events are kept without a category.

    Raises:
        HTTPException: If the category does not exist.
    """
    if not crud_categories.delete(db, category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return {"ok": True}


@router.get("/", response_model=List[schemas.EventOut])
def list_events(db: Session = Depends(get_db)):
    """
    Retrieve all events, most recent date first.

    Returns:
        list[EventOut]: Events, or the fixture events when the database
        cannot be read.
    """
    return crud_events.get_all(db).unwrap_or(fixtures.EVENTS)


@router.get("/upcoming", response_model=List[schemas.EventOut])
def upcoming_events(
    limit: int = Query(3, ge=1, le=50),
    today: date | None = Query(None),
    db: Session = Depends(get_db),
):
    """
    Retrieve events dated today or later, soonest first.

    Args:
        limit (int): Maximum number of events.
        today (date | None): Reference day, defaults to the current date.
        db (Session): Database session.

    Returns:
        list[EventOut]: Upcoming events.
    """
    return crud_events.get_upcoming(db, limit=limit, today=today).unwrap_or_else(
        lambda error: fixtures.upcoming_events(today or utcnow().date(), limit)
    )


@router.get("/category/{category_id}", response_model=List[schemas.EventOut])
def events_by_category(category_id: str, db: Session = Depends(get_db)):
    return crud_events.get_by_category(db, category_id).unwrap_or_else(
        lambda error: [e for e in fixtures.EVENTS if e.category_id == category_id]
    )


def _find_event(db: Session, event_id: str) -> schemas.EventOut:
    event = crud_events.get_by_id(db, event_id).unwrap_or_else(
        lambda error: fixtures.find_by_id(fixtures.EVENTS, event_id)
    )
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.get("/{event_id}", response_model=schemas.EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    """
    Retrieve a single event with its category.

    Raises:
        HTTPException: If the event is not found.

    Returns:
        EventOut: Event data.
    """
    return _find_event(db, event_id)


@router.get("/{event_id}/calendar.ics")
def event_calendar_file(event_id: str, db: Session = Depends(get_db)):
    """
    Download the event as an iCalendar file.

    Raises:
        HTTPException: If the event is not found.
    """
    event = _find_event(db, event_id)
    return Response(
        content=icalendar_file(event),
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="{calendar_filename(event)}"'},
    )


@router.get("/{event_id}/calendar-links")
def event_calendar_links(event_id: str, db: Session = Depends(get_db)):
    event = _find_event(db, event_id)
    return {"google": google_calendar_url(event), "outlook": outlook_calendar_url(event)}


@router.post("/", response_model=schemas.EventOut, status_code=status.HTTP_201_CREATED)
def create_event(event_in: schemas.EventCreate, db: Session = Depends(get_db)):
    """
    Create a new event.

    Args:
        event_in (EventCreate): Event data.
        db (Session): Database session.

    Returns:
        EventOut: Created event.
    """
    return crud_events.create(db, event_in)


@router.patch("/{event_id}", response_model=schemas.EventOut)
def patch_event(event_id: str, changes: schemas.EventUpdate, db: Session = Depends(get_db)):
    """
    Partially update an event.

    Only fields provided in the request are written; ``"coordinates": null``
    clears the map position.

    Raises:
        HTTPException: If the event is not found.

    Returns:
        EventOut: Updated event.
    """
    event = crud_events.update(db, event_id, changes)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.delete("/{event_id}")
def remove_event(event_id: str, db: Session = Depends(get_db)):
    if not crud_events.delete(db, event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    return {"ok": True}
