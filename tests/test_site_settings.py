import pytest
from fastapi import status
from pydantic import ValidationError

from chefsite import models
from chefsite.local_storage import LocalStorage
from chefsite.site_settings import (
    LOCAL_STORAGE_KEY,
    SETTINGS_KEY,
    DatabaseSettingsStore,
    LocalSettingsStore,
    SiteSettings,
    camelize,
    compute_theme_variables,
    deep_merge,
    default_settings,
    merge_settings,
    notification_recipients,
    settings_from_blob,
)


def test_camelize():
    assert camelize("hero_image") == "heroImage"
    assert camelize("terms_and_conditions") == "termsAndConditions"
    assert camelize("title") == "title"


def test_defaults_serialize_with_historical_keys():
    blob = default_settings().to_blob()

    assert blob["title"] == "Chef Margaret Alvis"
    assert blob["heroImage"] == "/placeholder.svg"
    assert blob["giftCertificates"]["amounts"] == ["50", "100", "200", "500", "Custom"]
    assert blob["instagram"]["displayCount"] == 6
    assert blob["theme"]["colors"]["primary"] == "#4A5568"
    assert blob["theme"]["buttons"]["hoverEffect"] == "darken"


def test_partial_blob_is_filled_from_defaults():
    settings = settings_from_blob({"title": "Chef Ana", "theme": {"colors": {"primary": "#000000"}}})

    assert settings.title == "Chef Ana"
    assert settings.theme.colors.primary == "#000000"
    assert settings.theme.colors.secondary == "#718096"
    assert settings.footer_text == default_settings().footer_text


def test_invalid_section_falls_back_to_its_default():
    settings = settings_from_blob({"title": "Chef Ana", "instagram": {"displayCount": "many"}})

    assert settings.title == "Chef Ana"
    assert settings.instagram.display_count == 6


def test_unreadable_blob_yields_defaults():
    assert settings_from_blob("not an object") == default_settings()
    assert settings_from_blob(None) == default_settings()


def test_deep_merge_keeps_unmentioned_keys():
    base = {"a": 1, "nested": {"x": 1, "y": 2}, "items": [1, 2]}
    merged = deep_merge(base, {"nested": {"y": 3}, "items": [9]})

    assert merged == {"a": 1, "nested": {"x": 1, "y": 3}, "items": [9]}
    assert base["nested"]["y"] == 2


def test_merge_settings_accepts_snake_and_camel_keys():
    current = default_settings()

    merged = merge_settings(current, {"footer_text": "Bye", "socialMedia": {"instagram": "@chef"}})

    assert merged.footer_text == "Bye"
    assert merged.social_media.instagram == "@chef"
    assert merged.social_media.facebook == ""


def test_merge_settings_rejects_invalid_values():
    with pytest.raises(ValidationError):
        merge_settings(default_settings(), {"instagram": {"displayCount": "many"}})


def test_database_store_round_trip(db_session):
    store = DatabaseSettingsStore(db_session)
    assert store.get() == default_settings()

    settings = merge_settings(default_settings(), {"title": "Chef Ana"})
    assert store.save(settings) is True
    assert store.get().title == "Chef Ana"

    updated = store.update({"theme": {"spacing": "compact"}})
    assert updated.title == "Chef Ana"
    assert updated.theme.spacing == "compact"

    row = db_session.get(models.SiteSettingsRow, SETTINGS_KEY)
    assert row.value["theme"]["spacing"] == "compact"


def test_database_store_without_database():
    store = DatabaseSettingsStore(None)

    assert store.load().is_err()
    assert store.get() == default_settings()
    assert store.save(default_settings()) is False
    assert store.update({"title": "x"}) is None


def test_local_store_uses_camel_case_json():
    storage = LocalStorage({LOCAL_STORAGE_KEY: '{"title": "Stored", "heroImage": "/hero.png"}'})
    store = LocalSettingsStore(storage)

    assert store.get().hero_image == "/hero.png"
    store.update({"aboutTitle": "About Ana"})
    assert storage.get_json(LOCAL_STORAGE_KEY, {})["aboutTitle"] == "About Ana"


def test_local_store_with_garbage_returns_defaults():
    store = LocalSettingsStore(LocalStorage({LOCAL_STORAGE_KEY: "{not json"}))
    assert store.get() == default_settings()


def test_theme_variables_defaults():
    variables = compute_theme_variables(default_settings())

    assert variables["--color-primary"] == "#4A5568"
    assert variables["--color-primary-transparent"] == "#4A556880"
    assert variables["--border-radius"] == "0.375rem"
    assert variables["--radius"] == "0.375rem"
    assert variables["--spacing-unit"] == "1rem"
    assert variables["--content-width"] == "65rem"
    assert variables["--color-success"] == "#48BB78"
    assert variables["--primary-foreground"] == "#FFFFFF"
    assert variables["--foreground"] == "#1A202C"


def test_theme_variables_lookup_and_fallbacks():
    settings = merge_settings(
        default_settings(),
        {
            "theme": {
                "borderRadius": "large",
                "spacing": "enormous",
                "contentWidth": "full",
                "colors": {"success": "#00FF00"},
            }
        },
    )
    variables = compute_theme_variables(settings)

    assert variables["--border-radius"] == "0.5rem"
    assert variables["--spacing-unit"] == "1rem"
    assert variables["--content-width"] == "100%"
    assert variables["--color-success"] == "#00FF00"
    assert variables["--color-error"] == "#F56565"


def test_notification_recipients():
    disabled = merge_settings(
        default_settings(), {"messageNotifications": {"emailAddresses": "a@example.com"}}
    )
    assert notification_recipients(disabled) == []

    enabled = merge_settings(
        default_settings(),
        {
            "messageNotifications": {
                "enabled": True,
                "emailAddresses": "a@example.com, b@example.com;not-an-email  c@example.com",
            }
        },
    )
    assert notification_recipients(enabled) == ["a@example.com", "b@example.com", "c@example.com"]


def test_admin_settings_routes(client):
    initial = client.get("/admin/settings")
    assert initial.status_code == status.HTTP_200_OK
    assert initial.json()["title"] == "Chef Margaret Alvis"

    patched = client.patch("/admin/settings", json={"theme": {"borderRadius": "none"}})
    assert patched.json()["theme"]["borderRadius"] == "none"
    assert patched.json()["theme"]["colors"]["primary"] == "#4A5568"

    theme = client.get("/admin/theme")
    assert theme.json()["--border-radius"] == "0"

    invalid = client.patch("/admin/settings", json={"instagram": {"displayCount": "many"}})
    assert invalid.status_code == 422

    replaced = client.put("/admin/settings", json={"title": "Chef Ana"})
    assert replaced.json()["title"] == "Chef Ana"
    assert replaced.json()["theme"]["borderRadius"] == "medium"


def test_admin_settings_offline(offline_client):
    assert offline_client.get("/admin/settings").json() == SiteSettings().to_blob()

    saved = offline_client.put("/admin/settings", json={"title": "x"})
    assert saved.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
