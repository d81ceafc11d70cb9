"""Replay a browser local-storage export into the database.

Records are written create-or-update by natural key, so running the
migration twice leaves the row counts unchanged:

==================  ============================  =======================
Collection          Storage key                   Natural key
==================  ============================  =======================
events              ``events``                    source id
users               ``users``                     email
form submissions    ``formSubmissions``           source id
recipes             ``recipes``                   slug
blog posts          ``blogPosts``                 slug
site settings       ``siteSettings``              singleton row
==================  ============================  =======================

Events and submissions exported without an id get a deterministic one built
from their content. Every collection is migrated on its own: a failure stops
that collection and is reported in its :class:`MigrationOutcome`, the others
still run. With ``dry_run=True`` nothing is written and the outcome only
counts what would be created or updated.
"""

import re
from typing import Any, Callable, Hashable, Optional
from uuid import NAMESPACE_URL, uuid5

from pydantic import BaseModel, Field, TypeAdapter
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import schemas
from .crud import blog_posts as crud_blog_posts
from .crud import events as crud_events
from .crud import form_submissions as crud_submissions
from .crud import recipes as crud_recipes
from .crud import users as crud_users
from .errors import DataLayerError
from .local_storage import LocalStorage
from .logs import get_logger
from .site_settings import LOCAL_STORAGE_KEY, DatabaseSettingsStore, camelize, settings_from_blob

logger = get_logger(__name__)

submission_adapter = TypeAdapter(schemas.ImportedSubmission)

MIGRATION_ERRORS = (ValueError, TypeError, KeyError, DataLayerError, SQLAlchemyError)


class MigrationOutcome(BaseModel):
    """Result of migrating one collection."""

    success: bool = True
    count: int = 0
    created: int = 0
    updated: int = 0
    error: Optional[str] = None


class MigrationReport(BaseModel):
    """Outcome per collection; serialized with camelCase keys."""

    events: MigrationOutcome = Field(default_factory=MigrationOutcome)
    users: MigrationOutcome = Field(default_factory=MigrationOutcome)
    form_submissions: MigrationOutcome = Field(default_factory=MigrationOutcome)
    recipes: MigrationOutcome = Field(default_factory=MigrationOutcome)
    blog_posts: MigrationOutcome = Field(default_factory=MigrationOutcome)
    site_settings: MigrationOutcome = Field(default_factory=MigrationOutcome)
    dry_run: bool = False

    class Config:
        alias_generator = camelize
        populate_by_name = True

    @property
    def success(self) -> bool:
        return all(
            outcome.success
            for outcome in (
                self.events,
                self.users,
                self.form_submissions,
                self.recipes,
                self.blog_posts,
                self.site_settings,
            )
        )


def snake_case(name: str) -> str:
    """
    Convert a camelCase key to snake_case.

    >>> snake_case("featuredImage")
    'featured_image'
    """
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name).lower()


def normalize_record(record: Any) -> dict[str, Any]:
    """Return ``record`` with snake_case top-level keys."""
    if not isinstance(record, dict):
        raise TypeError(f"expected an object, got {type(record).__name__}")
    return {snake_case(str(key)): value for key, value in record.items()}


def read_collection(storage: LocalStorage, key: str) -> list[dict[str, Any]]:
    """Read a stored array; absent, unparseable or non-array values are empty."""
    value = storage.get_json(key, [])
    if not isinstance(value, list):
        logger.warning("migration_collection_not_a_list", key=key)
        return []
    return value


def _content_id(kind: str, *parts: Any) -> str:
    return str(uuid5(NAMESPACE_URL, ":".join(["chefsite", kind, *map(str, parts)])))


def _found(record: Any) -> bool:
    return record is not None


def _replay(
    collection: str,
    records: list[Any],
    prepare: Callable[[dict[str, Any]], tuple[Hashable, Any]],
    exists: Callable[[Hashable], bool],
    store: Callable[[Hashable, Any, bool], None],
    dry_run: bool,
) -> MigrationOutcome:
    """
    Replay ``records`` one by one.

    ``prepare`` turns a normalized record into ``(natural_key, payload)``,
    ``exists`` tells whether the key is already stored and ``store`` writes
    the payload. The first error ends the collection.
    """
    outcome = MigrationOutcome()
    seen: set[Hashable] = set()
    try:
        for record in records:
            key, payload = prepare(normalize_record(record))
            found = key in seen or exists(key)
            if not dry_run:
                store(key, payload, found)
            seen.add(key)
            outcome.count += 1
            if found:
                outcome.updated += 1
            else:
                outcome.created += 1
    except MIGRATION_ERRORS as exc:
        outcome.success = False
        outcome.error = str(exc)
        logger.error(
            "migration_collection_failed",
            collection=collection,
            migrated=outcome.count,
            error=str(exc),
        )
        return outcome

    logger.info(
        "migration_collection_done",
        collection=collection,
        dry_run=dry_run,
        created=outcome.created,
        updated=outcome.updated,
    )
    return outcome


def _prepare_event(record: dict[str, Any]) -> tuple[str, schemas.EventCreate]:
    record.setdefault("featured_image", record.get("image") or "")
    if not record.get("title"):
        record["title"] = record.get("description") or "Untitled event"
    payload = schemas.EventCreate.model_validate(record)
    event_id = record.get("id") or _content_id("event", payload.title, payload.date)
    return str(event_id), payload


def migrate_events(db: Session | None, storage: LocalStorage, dry_run: bool = False) -> MigrationOutcome:
    """Create or update events keyed by their source id."""

    def exists(event_id):
        return crud_events.get_by_id(db, event_id).map(_found).unwrap()

    def store(event_id, payload, found):
        if found:
            crud_events.update(db, event_id, schemas.EventUpdate(**payload.model_dump()))
        else:
            crud_events.create(db, payload, event_id=event_id)

    return _replay("events", read_collection(storage, "events"), _prepare_event, exists, store, dry_run)


def migrate_users(db: Session | None, storage: LocalStorage, dry_run: bool = False) -> MigrationOutcome:
    """Save users keyed by email."""

    def prepare(record):
        payload = schemas.UserCreate.model_validate(record)
        return payload.email, payload

    def exists(email):
        return crud_users.get_by_email(db, email).map(_found).unwrap()

    def store(email, payload, found):
        crud_users.save(db, payload)

    return _replay("users", read_collection(storage, "users"), prepare, exists, store, dry_run)


def _prepare_submission(record: dict[str, Any]):
    if "date" in record and "event_date" not in record:
        record["event_date"] = record.pop("date") or None
    if record.get("type") == "contact" and record.get("message") is None:
        record["message"] = ""
    payload = submission_adapter.validate_python(record)
    submission_id = record.get("id") or _content_id(
        "submission", payload.type, payload.email, payload.timestamp
    )
    return str(submission_id), (payload, bool(record.get("is_processed")))


def migrate_form_submissions(
    db: Session | None, storage: LocalStorage, dry_run: bool = False
) -> MigrationOutcome:
    """Create or update contact and gift certificate submissions keyed by source id."""

    def exists(submission_id):
        return crud_submissions.get_by_id(db, submission_id).map(_found).unwrap()

    def store(submission_id, prepared, found):
        payload, is_processed = prepared
        if found:
            crud_submissions.update(
                db, submission_id, schemas.FormSubmissionUpdate(message=payload.message)
            )
        else:
            crud_submissions.create(db, payload, submission_id=submission_id)
        if payload.type == "gift-certificate" and (found or is_processed):
            crud_submissions.set_processed(db, submission_id, is_processed)

    return _replay(
        "form_submissions",
        read_collection(storage, "formSubmissions"),
        _prepare_submission,
        exists,
        store,
        dry_run,
    )


def migrate_recipes(db: Session | None, storage: LocalStorage, dry_run: bool = False) -> MigrationOutcome:
    """Save recipes keyed by slug."""

    def prepare(record):
        payload = schemas.RecipeCreate.model_validate(record)
        return payload.slug, payload

    def exists(slug):
        return crud_recipes.get_by_slug(db, slug).map(_found).unwrap()

    def store(slug, payload, found):
        crud_recipes.save(db, payload)

    return _replay("recipes", read_collection(storage, "recipes"), prepare, exists, store, dry_run)


def migrate_blog_posts(db: Session | None, storage: LocalStorage, dry_run: bool = False) -> MigrationOutcome:
    """Save blog posts keyed by slug."""

    def prepare(record):
        payload = schemas.BlogPostCreate.model_validate(record)
        return payload.slug, payload

    def exists(slug):
        return crud_blog_posts.get_by_slug(db, slug).map(_found).unwrap()

    def store(slug, payload, found):
        crud_blog_posts.save(db, payload)

    return _replay("blog_posts", read_collection(storage, "blogPosts"), prepare, exists, store, dry_run)


def migrate_site_settings(
    db: Session | None, storage: LocalStorage, dry_run: bool = False
) -> MigrationOutcome:
    """Copy the stored settings, reconciled with the defaults, into the settings row."""
    blob = storage.get_json(LOCAL_STORAGE_KEY, {})
    if not isinstance(blob, dict) or not blob:
        return MigrationOutcome()

    store = DatabaseSettingsStore(db)
    try:
        found = store.exists().unwrap()
    except DataLayerError as exc:
        logger.error("migration_collection_failed", collection="site_settings", error=str(exc))
        return MigrationOutcome(success=False, error=str(exc))

    if not dry_run and not store.save(settings_from_blob(blob)):
        logger.error("migration_collection_failed", collection="site_settings", error="save failed")
        return MigrationOutcome(success=False, error="Failed to save site settings")

    return MigrationOutcome(count=1, created=0 if found else 1, updated=1 if found else 0)


def migrate_all(db: Session | None, storage: LocalStorage, dry_run: bool = False) -> MigrationReport:
    """
    Migrate every collection.

    Args:
        db (Session | None): Database session.
        storage (LocalStorage): Local-storage export.
        dry_run (bool): Count only, write nothing.

    Returns:
        MigrationReport: One outcome per collection.
    """
    logger.info("migration_started", dry_run=dry_run)
    report = MigrationReport(
        events=migrate_events(db, storage, dry_run),
        users=migrate_users(db, storage, dry_run),
        form_submissions=migrate_form_submissions(db, storage, dry_run),
        recipes=migrate_recipes(db, storage, dry_run),
        blog_posts=migrate_blog_posts(db, storage, dry_run),
        site_settings=migrate_site_settings(db, storage, dry_run),
        dry_run=dry_run,
    )
    logger.info("migration_finished", dry_run=dry_run, success=report.success)
    return report
