"""Repository for blog posts."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import execute, read, write
from ..models import utcnow
from ..result import Result
from .base import apply_update, build_changeset, delete_by_id, has_tag, require_changes

ENTITY = "blog post"


def _to_out(post: models.BlogPost) -> schemas.BlogPostOut:
    return schemas.BlogPostOut.model_validate(post)


def _newest_first():
    return select(models.BlogPost).order_by(models.BlogPost.published_date.desc())


def get_all(db: Session | None) -> Result[list[schemas.BlogPostOut]]:
    """Retrieve all posts, most recently published first."""

    def run(session: Session):
        return [_to_out(p) for p in execute(session, _newest_first()).scalars().all()]

    return read(db, "fetch blog posts", run)


def get_featured(db: Session | None, limit: int = 3) -> Result[list[schemas.BlogPostOut]]:
    """Retrieve up to ``limit`` featured posts."""

    def run(session: Session):
        stmt = _newest_first().where(models.BlogPost.featured.is_(True)).limit(limit)
        return [_to_out(p) for p in execute(session, stmt).scalars().all()]

    return read(db, "fetch featured blog posts", run)


def get_by_category(db: Session | None, category: str) -> Result[list[schemas.BlogPostOut]]:
    """Retrieve posts in ``category``."""

    def run(session: Session):
        stmt = _newest_first().where(models.BlogPost.category == category)
        return [_to_out(p) for p in execute(session, stmt).scalars().all()]

    return read(db, "fetch blog posts by category", run)


def get_by_tag(db: Session | None, tag: str) -> Result[list[schemas.BlogPostOut]]:
    """Retrieve posts carrying ``tag`` (case-insensitive)."""

    def run(session: Session):
        posts = execute(session, _newest_first()).scalars().all()
        return [_to_out(p) for p in posts if has_tag(p.tags, tag)]

    return read(db, "fetch blog posts by tag", run)


def get_by_id(db: Session | None, post_id: str) -> Result[schemas.BlogPostOut | None]:
    """Retrieve a post by id, ``Ok(None)`` when missing."""

    def run(session: Session):
        post = session.get(models.BlogPost, post_id)
        return _to_out(post) if post else None

    return read(db, "fetch blog post by id", run)


def get_by_slug(db: Session | None, slug: str) -> Result[schemas.BlogPostOut | None]:
    """Retrieve a post by slug, ``Ok(None)`` when missing."""

    def run(session: Session):
        stmt = select(models.BlogPost).where(models.BlogPost.slug == slug)
        post = execute(session, stmt).scalar_one_or_none()
        return _to_out(post) if post else None

    return read(db, "fetch blog post by slug", run)


def create(db: Session | None, post_in: schemas.BlogPostCreate) -> schemas.BlogPostOut:
    """
    Create a blog post.

    Raises:
        IntegrityError: If the slug is already taken.
    """

    def run(session: Session):
        data = post_in.model_dump()
        data["published_date"] = data.get("published_date") or utcnow()
        post = models.BlogPost(**data)
        session.add(post)
        session.commit()
        session.refresh(post)
        return _to_out(post)

    return write(db, "create blog post", run)


def save(db: Session | None, post_in: schemas.BlogPostCreate) -> tuple[schemas.BlogPostOut, bool]:
    """Create the post, or overwrite the one with the same slug."""

    def run(session: Session):
        stmt = select(models.BlogPost).where(models.BlogPost.slug == post_in.slug)
        post = execute(session, stmt, retry=False).scalar_one_or_none()
        created = post is None
        data = post_in.model_dump(exclude_none=True)
        if created:
            data.setdefault("published_date", utcnow())
            post = models.BlogPost(**data)
            session.add(post)
        else:
            for key, value in data.items():
                setattr(post, key, value)
        session.commit()
        session.refresh(post)
        return _to_out(post), created

    return write(db, "save blog post", run)


def update(db: Session | None, post_id: str, changes: schemas.BlogPostUpdate) -> schemas.BlogPostOut | None:
    """
    Partially update a blog post.

    Raises:
        NothingToUpdateError: If ``changes`` has no fields set.
    """
    pairs = require_changes(ENTITY, build_changeset(models.BlogPost, changes))

    def run(session: Session):
        if not apply_update(session, models.BlogPost, ENTITY, post_id, pairs):
            return None
        return _to_out(session.get(models.BlogPost, post_id))

    return write(db, "update blog post", run)


def delete(db: Session | None, post_id: str) -> bool:
    """Delete a blog post. Returns whether a row was removed."""
    return write(db, "delete blog post", lambda session: delete_by_id(session, models.BlogPost, post_id))
