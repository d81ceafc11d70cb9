"""Contact and gift certificate form submission routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from . import schemas
from .crud import form_submissions as crud_submissions
from .database import get_db
from .logs import get_logger
from .site_settings import DatabaseSettingsStore, notification_recipients

router = APIRouter(prefix="/submissions", tags=["submissions"])
logger = get_logger(__name__)


def _announce(db: Session | None, submission: schemas.FormSubmissionOut) -> None:
    recipients = notification_recipients(DatabaseSettingsStore(db).get())
    if recipients:
        logger.info(
            "submission_notification_pending",
            submission_id=submission.id,
            submission_type=submission.type,
            recipients=recipients,
        )


@router.post(
    "/contact",
    response_model=schemas.FormSubmissionOut,
    status_code=status.HTTP_201_CREATED,
)
def submit_contact(submission_in: schemas.ContactSubmissionCreate, db: Session = Depends(get_db)):
    """
    Store a contact form submission.

    Args:
        submission_in (ContactSubmissionCreate): Form data.
        db (Session): Database session.

    Returns:
        FormSubmissionOut: Stored submission.
    """
    submission = crud_submissions.create_contact_submission(db, submission_in)
    _announce(db, submission)
    return submission


@router.post(
    "/gift-certificate",
    response_model=schemas.FormSubmissionOut,
    status_code=status.HTTP_201_CREATED,
)
def submit_gift_certificate(
    submission_in: schemas.GiftCertificateSubmissionCreate,
    db: Session = Depends(get_db),
):
    """
    Store a gift certificate request. It starts unprocessed.

    Returns:
        FormSubmissionOut: Stored submission.
    """
    submission = crud_submissions.create_gift_certificate_submission(db, submission_in)
    _announce(db, submission)
    return submission


@router.get("/", response_model=List[schemas.FormSubmissionOut])
def list_submissions(
    type: Optional[schemas.SubmissionType] = Query(None),
    db: Session = Depends(get_db),
):
    """
    Retrieve submissions, newest first, optionally of one type.

    Submissions have no fixtures: an unreadable database yields an empty list.
    """
    if type:
        return crud_submissions.get_by_type(db, type).unwrap_or([])
    return crud_submissions.get_all(db).unwrap_or([])


@router.get("/{submission_id}", response_model=schemas.FormSubmissionOut)
def get_submission(submission_id: str, db: Session = Depends(get_db)):
    submission = crud_submissions.get_by_id(db, submission_id).unwrap_or(None)
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    return submission


@router.patch("/{submission_id}", response_model=schemas.FormSubmissionOut)
def patch_submission(
    submission_id: str,
    changes: schemas.FormSubmissionUpdate,
    db: Session = Depends(get_db),
):
    submission = crud_submissions.update(db, submission_id, changes)
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    return submission


@router.put("/{submission_id}/processed", response_model=schemas.FormSubmissionOut)
def set_processed(
    submission_id: str,
    value: bool = Query(True),
    db: Session = Depends(get_db),
):
    """
    Mark a gift certificate request as processed, or back to pending.

    Raises:
        HTTPException: If no gift certificate request has this id.
    """
    submission = crud_submissions.set_processed(db, submission_id, value)
    if not submission:
        raise HTTPException(status_code=404, detail="Gift certificate request not found")
    return submission


@router.delete("/{submission_id}")
def remove_submission(submission_id: str, db: Session = Depends(get_db)):
    if not crud_submissions.delete(db, submission_id):
        raise HTTPException(status_code=404, detail="Submission not found")
    return {"ok": True}
