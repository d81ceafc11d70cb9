"""Helpers shared by the entity repositories.

The partial-update path never interpolates values into SQL: a changeset is a
list of ``(column, value)`` pairs handed to SQLAlchemy's ``update()``
construct, which binds every value as a parameter.
"""

import re
import unicodedata
from typing import Any, Iterable

from pydantic import BaseModel
from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from ..database import execute
from ..errors import NothingToUpdateError

Changeset = list[tuple[Any, Any]]


def slugify(value: str) -> str:
    """
    Build a URL-safe slug from free text.

    >>> slugify("Wine & Cheese Pairing!")
    'wine-cheese-pairing'
    """
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-zA-Z0-9]+", "-", value).strip("-").lower()
    return value


def build_changeset(model, changes: BaseModel | dict, skip: Iterable[str] = ()) -> Changeset:
    """
    Turn a partial update into ``(column, value)`` pairs.

    Only fields explicitly present in ``changes`` are considered. An explicit
    ``None`` is kept for nullable columns and dropped for required ones.

    Args:
        model: ORM model class.
        changes (BaseModel | dict): Partial update payload.
        skip (Iterable[str]): Field names handled by the caller.

    Returns:
        list[tuple[Column, Any]]: Column assignments.
    """
    if isinstance(changes, BaseModel):
        changes = changes.model_dump(exclude_unset=True)
    skipped = set(skip)
    table = model.__table__
    pairs: Changeset = []
    for field, value in changes.items():
        if field in skipped or field not in table.columns:
            continue
        column = table.columns[field]
        if value is None and not column.nullable:
            continue
        pairs.append((column, value))
    return pairs


def require_changes(entity: str, pairs: Changeset) -> Changeset:
    """Raise :class:`NothingToUpdateError` for an empty changeset, before any session is touched."""
    if not pairs:
        raise NothingToUpdateError(entity)
    return pairs


def apply_update(db: Session, model, entity: str, entity_id: str, pairs: Changeset) -> bool:
    """
    Run an ``UPDATE`` for ``pairs`` on the row with ``entity_id``.

    Raises:
        NothingToUpdateError: If ``pairs`` is empty; nothing is written.

    Returns:
        bool: Whether a row matched.
    """
    require_changes(entity, pairs)
    stmt = update(model).where(model.id == entity_id).values(dict(pairs))
    result = execute(db, stmt, retry=False)
    db.commit()
    return result.rowcount > 0


def delete_by_id(db: Session, model, entity_id: str) -> bool:
    """Delete one row by id and report whether it existed."""
    result = execute(db, delete(model).where(model.id == entity_id), retry=False)
    db.commit()
    return result.rowcount > 0


def has_tag(tags: list[str] | None, tag: str) -> bool:
    """Case-insensitive membership test over a JSON tag list."""
    wanted = tag.strip().lower()
    return any(str(t).strip().lower() == wanted for t in tags or [])
