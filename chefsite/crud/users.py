"""Repository for users who signed up on the site.

``create`` inserts unconditionally and leaves duplicate emails to the unique
constraint; ``save`` is the upsert keyed by email.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import execute, log_error, read, write
from ..logs import get_logger
from ..models import utcnow
from ..result import Result
from .base import apply_update, build_changeset, delete_by_id, require_changes

ENTITY = "user"

logger = get_logger(__name__)


def _to_out(user: models.User) -> schemas.UserOut:
    return schemas.UserOut.model_validate(user)


def get_all(db: Session | None) -> Result[list[schemas.UserOut]]:
    """Retrieve all users, newest signup first."""

    def run(session: Session):
        stmt = select(models.User).order_by(models.User.signup_date.desc())
        return [_to_out(u) for u in execute(session, stmt).scalars().all()]

    return read(db, "fetch users", run)


def get_newsletter_subscribers(db: Session | None) -> Result[list[schemas.UserOut]]:
    """Retrieve users who opted into the newsletter, newest signup first."""

    def run(session: Session):
        stmt = (
            select(models.User)
            .where(models.User.subscribe_newsletter.is_(True))
            .order_by(models.User.signup_date.desc())
        )
        return [_to_out(u) for u in execute(session, stmt).scalars().all()]

    return read(db, "fetch newsletter subscribers", run)


def get_by_ids(db: Session | None, user_ids: list[str]) -> Result[list[schemas.UserOut]]:
    """Retrieve the users whose ids are listed; unknown ids are ignored."""

    def run(session: Session):
        if not user_ids:
            return []
        stmt = select(models.User).where(models.User.id.in_(user_ids))
        return [_to_out(u) for u in execute(session, stmt).scalars().all()]

    return read(db, "fetch users by ids", run)


def get_by_id(db: Session | None, user_id: str) -> Result[schemas.UserOut | None]:
    """Retrieve a user by id, ``Ok(None)`` when missing."""

    def run(session: Session):
        user = session.get(models.User, user_id)
        return _to_out(user) if user else None

    return read(db, "fetch user", run)


def get_by_email(db: Session | None, email: str) -> Result[schemas.UserOut | None]:
    """Retrieve a user by email address, ``Ok(None)`` when missing."""

    def run(session: Session):
        stmt = select(models.User).where(models.User.email == email)
        user = execute(session, stmt).scalar_one_or_none()
        return _to_out(user) if user else None

    return read(db, "fetch user by email", run)


def create(db: Session | None, user_in: schemas.UserCreate) -> schemas.UserOut:
    """
    Insert a new user.

    Raises:
        IntegrityError: If the email is already registered.
    """

    def run(session: Session):
        user = models.User(**user_in.model_dump())
        session.add(user)
        session.commit()
        session.refresh(user)
        return _to_out(user)

    return write(db, "create user", run)


def save(db: Session | None, user_in: schemas.UserCreate) -> tuple[schemas.UserOut, bool]:
    """
    Create the user, or update the existing one with the same email.

    Returns:
        tuple[UserOut, bool]: The stored user and whether it was created.
    """

    def run(session: Session):
        stmt = select(models.User).where(models.User.email == user_in.email)
        user = execute(session, stmt, retry=False).scalar_one_or_none()
        created = user is None
        if created:
            user = models.User(**user_in.model_dump())
            session.add(user)
        else:
            for key, value in user_in.model_dump(exclude_unset=True).items():
                setattr(user, key, value)
        session.commit()
        session.refresh(user)
        return _to_out(user), created

    return write(db, "save user", run)


def update(db: Session | None, user_id: str, changes: schemas.UserUpdate) -> schemas.UserOut | None:
    """
    Partially update a user.

    Raises:
        NothingToUpdateError: If ``changes`` has no fields set.
    """
    pairs = require_changes(ENTITY, build_changeset(models.User, changes))

    def run(session: Session):
        if not apply_update(session, models.User, ENTITY, user_id, pairs):
            return None
        return _to_out(session.get(models.User, user_id))

    return write(db, "update user", run)


def update_last_contacted(
    db: Session | None, user_id: str, event_id: str, event_name: str
) -> schemas.UserOut | None:
    """Record that a user was contacted about an event."""
    return update(
        db,
        user_id,
        schemas.UserUpdate(
            last_contacted_date=utcnow(),
            last_contacted_event_id=event_id,
            last_contacted_event_name=event_name,
        ),
    )


def mark_contacted(
    db: Session | None, user_ids: list[str], event_id: str, event_name: str
) -> dict[str, list[str]]:
    """
    Record an event notification for several users.

    One update is issued per user. Failures are collected and do not undo
    the updates that already succeeded.

    Returns:
        dict: ``updated``, ``missing`` and ``failed`` user ids.
    """
    outcome: dict[str, list[str]] = {"updated": [], "missing": [], "failed": []}
    for user_id in user_ids:
        try:
            user = update_last_contacted(db, user_id, event_id, event_name)
        except SQLAlchemyError as exc:
            log_error(exc, f"mark user {user_id} contacted")
            outcome["failed"].append(user_id)
            continue
        outcome["updated" if user else "missing"].append(user_id)
    logger.info(
        "users_marked_contacted",
        event_id=event_id,
        updated=len(outcome["updated"]),
        failed=len(outcome["failed"]),
    )
    return outcome


def delete(db: Session | None, user_id: str) -> bool:
    """Delete a user. Returns whether a row was removed."""
    return write(db, "delete user", lambda session: delete_by_id(session, models.User, user_id))
