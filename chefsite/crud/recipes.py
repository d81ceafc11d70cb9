"""Repository for recipes.

Tags are stored in a JSON column, so tag filtering happens in Python over
the ordered result set.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import execute, read, write
from ..models import utcnow
from ..result import Result
from .base import apply_update, build_changeset, delete_by_id, has_tag, require_changes

ENTITY = "recipe"


def _to_out(recipe: models.Recipe) -> schemas.RecipeOut:
    return schemas.RecipeOut.model_validate(recipe)


def _newest_first():
    return select(models.Recipe).order_by(models.Recipe.published_date.desc())


def get_all(db: Session | None) -> Result[list[schemas.RecipeOut]]:
    """Retrieve all recipes, most recently published first."""

    def run(session: Session):
        return [_to_out(r) for r in execute(session, _newest_first()).scalars().all()]

    return read(db, "fetch recipes", run)


def get_featured(db: Session | None, limit: int = 3) -> Result[list[schemas.RecipeOut]]:
    """Retrieve up to ``limit`` featured recipes."""

    def run(session: Session):
        stmt = _newest_first().where(models.Recipe.featured.is_(True)).limit(limit)
        return [_to_out(r) for r in execute(session, stmt).scalars().all()]

    return read(db, "fetch featured recipes", run)


def get_by_tag(db: Session | None, tag: str) -> Result[list[schemas.RecipeOut]]:
    """Retrieve recipes carrying ``tag`` (case-insensitive)."""

    def run(session: Session):
        recipes = execute(session, _newest_first()).scalars().all()
        return [_to_out(r) for r in recipes if has_tag(r.tags, tag)]

    return read(db, "fetch recipes by tag", run)


def get_by_id(db: Session | None, recipe_id: str) -> Result[schemas.RecipeOut | None]:
    """Retrieve a recipe by id, ``Ok(None)`` when missing."""

    def run(session: Session):
        recipe = session.get(models.Recipe, recipe_id)
        return _to_out(recipe) if recipe else None

    return read(db, "fetch recipe by id", run)


def get_by_slug(db: Session | None, slug: str) -> Result[schemas.RecipeOut | None]:
    """Retrieve a recipe by slug, ``Ok(None)`` when missing."""

    def run(session: Session):
        stmt = select(models.Recipe).where(models.Recipe.slug == slug)
        recipe = execute(session, stmt).scalar_one_or_none()
        return _to_out(recipe) if recipe else None

    return read(db, "fetch recipe by slug", run)


def create(db: Session | None, recipe_in: schemas.RecipeCreate) -> schemas.RecipeOut:
    """
    Create a recipe.

    Raises:
        IntegrityError: If the slug is already taken.
    """

    def run(session: Session):
        data = recipe_in.model_dump()
        data["published_date"] = data.get("published_date") or utcnow()
        recipe = models.Recipe(**data)
        session.add(recipe)
        session.commit()
        session.refresh(recipe)
        return _to_out(recipe)

    return write(db, "create recipe", run)


def save(db: Session | None, recipe_in: schemas.RecipeCreate) -> tuple[schemas.RecipeOut, bool]:
    """
    Create the recipe, or overwrite the one with the same slug.

    Returns:
        tuple[RecipeOut, bool]: Stored recipe and whether it was created.
    """

    def run(session: Session):
        stmt = select(models.Recipe).where(models.Recipe.slug == recipe_in.slug)
        recipe = execute(session, stmt, retry=False).scalar_one_or_none()
        created = recipe is None
        data = recipe_in.model_dump(exclude_none=True)
        if created:
            data.setdefault("published_date", utcnow())
            recipe = models.Recipe(**data)
            session.add(recipe)
        else:
            for key, value in data.items():
                setattr(recipe, key, value)
        session.commit()
        session.refresh(recipe)
        return _to_out(recipe), created

    return write(db, "save recipe", run)


def update(db: Session | None, recipe_id: str, changes: schemas.RecipeUpdate) -> schemas.RecipeOut | None:
    """
    Partially update a recipe.

    Raises:
        NothingToUpdateError: If ``changes`` has no fields set.
    """
    pairs = require_changes(ENTITY, build_changeset(models.Recipe, changes))

    def run(session: Session):
        if not apply_update(session, models.Recipe, ENTITY, recipe_id, pairs):
            return None
        return _to_out(session.get(models.Recipe, recipe_id))

    return write(db, "update recipe", run)


def delete(db: Session | None, recipe_id: str) -> bool:
    """Delete a recipe. Returns whether a row was removed."""
    return write(db, "delete recipe", lambda session: delete_by_id(session, models.Recipe, recipe_id))
