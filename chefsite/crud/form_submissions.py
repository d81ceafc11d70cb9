"""Repository for contact and gift certificate form submissions."""

from sqlalchemy import select, update as sql_update
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import execute, read, write
from ..models import utcnow
from ..result import Result
from .base import apply_update, build_changeset, delete_by_id, require_changes

ENTITY = "form submission"
GIFT_CERTIFICATE = "gift-certificate"


def _to_out(submission: models.FormSubmission) -> schemas.FormSubmissionOut:
    return schemas.FormSubmissionOut.model_validate(submission)


def get_all(db: Session | None) -> Result[list[schemas.FormSubmissionOut]]:
    """Retrieve all submissions, newest first."""

    def run(session: Session):
        stmt = select(models.FormSubmission).order_by(models.FormSubmission.timestamp.desc())
        return [_to_out(s) for s in execute(session, stmt).scalars().all()]

    return read(db, "fetch form submissions", run)


def get_by_type(
    db: Session | None, submission_type: schemas.SubmissionType
) -> Result[list[schemas.FormSubmissionOut]]:
    """Retrieve submissions of one type, newest first."""

    def run(session: Session):
        stmt = (
            select(models.FormSubmission)
            .where(models.FormSubmission.type == submission_type)
            .order_by(models.FormSubmission.timestamp.desc())
        )
        return [_to_out(s) for s in execute(session, stmt).scalars().all()]

    return read(db, f"fetch {submission_type} submissions", run)


def get_by_id(db: Session | None, submission_id: str) -> Result[schemas.FormSubmissionOut | None]:
    """Retrieve a submission by id, ``Ok(None)`` when missing."""

    def run(session: Session):
        submission = session.get(models.FormSubmission, submission_id)
        return _to_out(submission) if submission else None

    return read(db, "fetch form submission", run)


def create(
    db: Session | None,
    submission_in: schemas.ContactSubmissionCreate | schemas.GiftCertificateSubmissionCreate,
    submission_id: str | None = None,
) -> schemas.FormSubmissionOut:
    """
    Store a submission of either type.

    Only the columns belonging to ``submission_in.type`` are populated; the
    payload schemas carry no fields of the other group.

    Args:
        db (Session | None): Database session.
        submission_in: Contact or gift certificate payload.
        submission_id (str | None): Explicit id, used when importing records.

    Returns:
        FormSubmissionOut: Stored submission.
    """

    def run(session: Session):
        data = submission_in.model_dump()
        data["timestamp"] = data.get("timestamp") or utcnow()
        submission = models.FormSubmission(**data, is_processed=False)
        if submission_id:
            submission.id = submission_id
        session.add(submission)
        session.commit()
        session.refresh(submission)
        return _to_out(submission)

    return write(db, f"create {submission_in.type} submission", run)


def create_contact_submission(
    db: Session | None, submission_in: schemas.ContactSubmissionCreate
) -> schemas.FormSubmissionOut:
    """Store a contact form submission."""
    return create(db, submission_in)


def create_gift_certificate_submission(
    db: Session | None, submission_in: schemas.GiftCertificateSubmissionCreate
) -> schemas.FormSubmissionOut:
    """Store a gift certificate request; it starts unprocessed."""
    return create(db, submission_in)


def update(
    db: Session | None, submission_id: str, changes: schemas.FormSubmissionUpdate
) -> schemas.FormSubmissionOut | None:
    """
    Partially update a submission.

    Raises:
        NothingToUpdateError: If ``changes`` has no fields set.
    """
    pairs = require_changes(ENTITY, build_changeset(models.FormSubmission, changes))

    def run(session: Session):
        if not apply_update(session, models.FormSubmission, ENTITY, submission_id, pairs):
            return None
        return _to_out(session.get(models.FormSubmission, submission_id))

    return write(db, "update form submission", run)


def set_processed(
    db: Session | None, submission_id: str, is_processed: bool
) -> schemas.FormSubmissionOut | None:
    """
    Mark a gift certificate request as processed or pending.

    Contact submissions never change; they are reported as not found.

    Returns:
        FormSubmissionOut | None: Updated request, ``None`` when no gift
        certificate request has ``submission_id``.
    """

    def run(session: Session):
        stmt = (
            sql_update(models.FormSubmission)
            .where(
                models.FormSubmission.id == submission_id,
                models.FormSubmission.type == GIFT_CERTIFICATE,
            )
            .values(is_processed=is_processed)
        )
        result = execute(session, stmt, retry=False)
        session.commit()
        if result.rowcount == 0:
            return None
        return _to_out(session.get(models.FormSubmission, submission_id))

    return write(db, "set gift certificate processed", run)


def delete(db: Session | None, submission_id: str) -> bool:
    """Delete a submission. Returns whether a row was removed."""
    return write(
        db,
        "delete form submission",
        lambda session: delete_by_id(session, models.FormSubmission, submission_id),
    )
