"""Row counts for the admin dashboard."""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import execute, read
from ..result import Result

COUNTED = {
    "users": models.User,
    "events": models.Event,
    "form_submissions": models.FormSubmission,
    "recipes": models.Recipe,
    "blog_posts": models.BlogPost,
}


def get_database_stats(db: Session | None) -> Result[schemas.DatabaseStats]:
    """Count the rows of every content table."""

    def run(session: Session):
        counts = {
            name: execute(session, select(func.count()).select_from(model)).scalar_one()
            for name, model in COUNTED.items()
        }
        return schemas.DatabaseStats(**counts)

    return read(db, "fetch database stats", run)
