"""Routes for site visitors who signed up."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from . import schemas
from .crud import users as crud_users
from .database import get_db

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=List[schemas.UserOut])
def list_users(db: Session = Depends(get_db)):
    """
    Retrieve all users, newest signup first.

    Users have no fixtures: an unreadable database yields an empty list.
    """
    return crud_users.get_all(db).unwrap_or([])


@router.get("/subscribers", response_model=List[schemas.UserOut])
def list_subscribers(db: Session = Depends(get_db)):
    return crud_users.get_newsletter_subscribers(db).unwrap_or([])


@router.post("/", response_model=schemas.UserOut)
def save_user(user_in: schemas.UserCreate, response: Response, db: Session = Depends(get_db)):
    """
    Create a user, or update the one registered with the same email.

    Args:
        user_in (UserCreate): User data.
        response (Response): Outgoing response, ``201`` when a user was created.
        db (Session): Database session.

    Returns:
        UserOut: Stored user.
    """
    user, created = crud_users.save(db, user_in)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return user


@router.post("/mark-contacted")
def mark_contacted(payload: schemas.MarkContactedRequest, db: Session = Depends(get_db)):
    """
    Record that the listed users were notified about an event.

    Returns:
        dict: ``updated``, ``missing`` and ``failed`` user ids.
    """
    return crud_users.mark_contacted(db, payload.user_ids, payload.event_id, payload.event_name)


@router.get("/{user_id}", response_model=schemas.UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    user = crud_users.get_by_id(db, user_id).unwrap_or(None)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.patch("/{user_id}", response_model=schemas.UserOut)
def patch_user(user_id: str, changes: schemas.UserUpdate, db: Session = Depends(get_db)):
    """
    Partially update a user.

    Raises:
        HTTPException: If the user is not found.
    """
    user = crud_users.update(db, user_id, changes)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.delete("/{user_id}")
def remove_user(user_id: str, db: Session = Depends(get_db)):
    if not crud_users.delete(db, user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return {"ok": True}
