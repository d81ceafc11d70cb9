"""Administrative routes: site settings, theme, dashboard stats and migration."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from . import schemas
from .crud.stats import get_database_stats
from .database import get_db
from .local_storage import LocalStorage
from .migration import migrate_all
from .site_settings import (
    DatabaseSettingsStore,
    SiteSettings,
    compute_theme_variables,
    settings_from_blob,
)

router = APIRouter(prefix="/admin", tags=["admin"])


def get_settings_store(db: Session = Depends(get_db)) -> DatabaseSettingsStore:
    """Dependency providing the database-backed settings store."""
    return DatabaseSettingsStore(db)


@router.get("/settings")
def read_settings(store: DatabaseSettingsStore = Depends(get_settings_store)):
    """
    Retrieve the site settings.

    Every key is present: stored values are merged over the defaults, and
    the defaults alone are returned when the database cannot be read.

    Returns:
        dict: Settings with camelCase keys.
    """
    return store.get().to_blob()


@router.put("/settings")
def replace_settings(
    settings_in: dict[str, Any] = Body(...),
    store: DatabaseSettingsStore = Depends(get_settings_store),
):
    """
    Replace the stored settings. Keys left out take their default value.

    Raises:
        HTTPException: 503 if the settings could not be saved.
    """
    settings = settings_from_blob(settings_in)
    if not store.save(settings):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to save site settings",
        )
    return settings.to_blob()


@router.patch("/settings")
def update_settings(
    changes: dict[str, Any] = Body(...),
    store: DatabaseSettingsStore = Depends(get_settings_store),
):
    """
    Merge a partial update into the stored settings.

    Only the keys present in the body change; nested sections are merged
    key by key.

    Raises:
        HTTPException: 422 if the merged settings are invalid, 503 if they
            could not be read or saved.
    """
    try:
        settings: SiteSettings | None = store.update(changes)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if settings is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to update site settings",
        )
    return settings.to_blob()


@router.get("/theme")
def theme_variables(store: DatabaseSettingsStore = Depends(get_settings_store)):
    """
    CSS custom properties for the configured theme.

    Returns:
        dict[str, str]: Variable name to value.
    """
    return compute_theme_variables(store.get())


@router.get("/stats", response_model=schemas.DatabaseStats)
def database_stats(db: Session = Depends(get_db)):
    """Row counts per table; zeros when the database cannot be read."""
    return get_database_stats(db).unwrap_or(schemas.DatabaseStats())


@router.post("/migrate")
def migrate(
    export: dict[str, Any] = Body(...),
    dry_run: bool = Query(False),
    db: Session = Depends(get_db),
):
    """
    Import a browser local-storage export.

    Args:
        export (dict): Local-storage keys mapped to their (JSON) values.
        dry_run (bool): Only count what would be created or updated.
        db (Session): Database session.

    Returns:
        dict: Outcome per collection with camelCase keys.
    """
    report = migrate_all(db, LocalStorage.from_export(export), dry_run=dry_run)
    return report.model_dump(by_alias=True)
