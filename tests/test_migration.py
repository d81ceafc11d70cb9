import json

import pytest
from fastapi import status
from pydantic import ValidationError

from chefsite import schemas
from chefsite.crud import blog_posts as crud_blog_posts
from chefsite.crud import events as crud_events
from chefsite.crud import form_submissions as crud_submissions
from chefsite.crud import recipes as crud_recipes
from chefsite.crud import users as crud_users
from chefsite.local_storage import LocalStorage
from chefsite.migration import migrate_all, normalize_record, snake_case
from chefsite.site_settings import DatabaseSettingsStore


EXPORT = {
    "events": [
        {"id": "1", "title": "Italian Night", "date": "2025-03-01", "featuredImage": "/it.png"},
        {"id": "2", "title": "Holiday Workshop", "date": "2025-12-10"},
        {"image": "/legacy.png", "date": "2024-06-01", "description": "Summer grilling class"},
    ],
    "users": [
        {"fullName": "Ann Lee", "email": "ann@example.com", "subscribeNewsletter": True},
        {"fullName": "Bob Ray", "email": "bob@example.com"},
    ],
    "formSubmissions": [
        {
            "id": "s1",
            "type": "contact",
            "timestamp": "2025-01-05T10:00:00Z",
            "name": "Cy",
            "email": "cy@example.com",
            "message": "Book a dinner",
            "contactType": "booking",
            "date": "2025-02-14",
            "guests": "6",
        }
    ],
    "recipes": [
        {
            "title": "Peach Cobbler",
            "slug": "peach-cobbler",
            "ingredients": ["peaches"],
            "instructions": ["bake"],
            "prepTime": 20,
            "cookTime": 45,
            "servings": 8,
            "difficulty": "easy",
            "tags": ["dessert"],
            "publishedDate": "2023-06-20T14:00:00Z",
        }
    ],
    "blogPosts": [{"title": "Tools", "slug": "tools", "content": "# Tools", "tags": ["tips"]}],
    "siteSettings": {"title": "Chef Ana", "theme": {"spacing": "spacious"}},
}


def storage():
    return LocalStorage.from_export(EXPORT)


def counts(db_session):
    return {
        "events": len(crud_events.get_all(db_session).unwrap()),
        "users": len(crud_users.get_all(db_session).unwrap()),
        "form_submissions": len(crud_submissions.get_all(db_session).unwrap()),
        "recipes": len(crud_recipes.get_all(db_session).unwrap()),
        "blog_posts": len(crud_blog_posts.get_all(db_session).unwrap()),
    }


def test_snake_case_normalization():
    assert snake_case("featuredImage") == "featured_image"
    assert snake_case("paymentAppUsername") == "payment_app_username"
    assert snake_case("title") == "title"
    assert normalize_record({"fullName": "Ann", "email": "a@example.com"}) == {
        "full_name": "Ann",
        "email": "a@example.com",
    }


def test_migrate_all_copies_every_collection(db_session):
    report = migrate_all(db_session, storage())

    assert report.success
    assert report.events.count == 3
    assert report.users.count == 2
    assert report.form_submissions.count == 1
    assert report.recipes.count == 1
    assert report.blog_posts.count == 1
    assert report.site_settings.count == 1
    assert counts(db_session) == {
        "events": 3,
        "users": 2,
        "form_submissions": 1,
        "recipes": 1,
        "blog_posts": 1,
    }

    submission = crud_submissions.get_by_id(db_session, "s1").unwrap()
    assert submission.contact_type == "booking"
    assert str(submission.event_date) == "2025-02-14"
    assert DatabaseSettingsStore(db_session).get().title == "Chef Ana"


def test_legacy_event_maps_image_and_description(db_session):
    migrate_all(db_session, storage())

    legacy = [e for e in crud_events.get_all(db_session).unwrap() if e.featured_image == "/legacy.png"]
    assert len(legacy) == 1
    assert legacy[0].title == "Summer grilling class"
    assert crud_events.get_by_id(db_session, "1").unwrap().featured_image == "/it.png"


def test_second_run_updates_instead_of_duplicating(db_session):
    migrate_all(db_session, storage())
    before = counts(db_session)

    report = migrate_all(db_session, storage())

    assert counts(db_session) == before
    assert report.events.created == 0
    assert report.events.updated == 3
    assert report.users.updated == 2
    assert report.site_settings.updated == 1


def test_dry_run_writes_nothing(db_session):
    report = migrate_all(db_session, storage(), dry_run=True)

    assert report.dry_run is True
    assert report.events.created == 3
    assert report.users.created == 2
    assert all(count == 0 for count in counts(db_session).values())
    assert DatabaseSettingsStore(db_session).exists().unwrap() is False


def test_failing_collection_does_not_stop_the_others(db_session):
    broken = dict(EXPORT, users=[{"fullName": "No Email"}])
    report = migrate_all(db_session, LocalStorage.from_export(broken))

    assert report.users.success is False
    assert report.users.error
    assert report.events.success is True
    assert report.events.count == 3
    assert report.success is False


def test_absent_and_unparseable_collections_are_empty(db_session):
    store = LocalStorage({"events": "{broken", "users": json.dumps({"not": "a list"})})
    report = migrate_all(db_session, store)

    assert report.success
    assert report.events.count == 0
    assert report.users.count == 0
    assert report.site_settings.count == 0


def test_migration_without_database_reports_failures():
    report = migrate_all(None, storage())

    assert report.events.success is False
    assert report.site_settings.success is False


def test_migrate_route(client):
    dry = client.post("/admin/migrate", json=EXPORT, params={"dry_run": "true"})
    assert dry.status_code == status.HTTP_200_OK
    assert dry.json()["dryRun"] is True
    assert dry.json()["formSubmissions"]["created"] == 1

    real = client.post("/admin/migrate", json=EXPORT)
    assert real.json()["blogPosts"]["count"] == 1

    stats = client.get("/admin/stats")
    assert stats.json() == {
        "users": 2,
        "events": 3,
        "form_submissions": 1,
        "recipes": 1,
        "blog_posts": 1,
    }


LEGACY_SUBMISSIONS = {
    "formSubmissions": [
        {
            "id": "g1",
            "type": "gift-certificate",
            "timestamp": "2024-11-02T09:00:00Z",
            "name": "Dee",
            "email": "dee@example.com",
            "isProcessed": True,
        },
        {
            "id": "c1",
            "type": "contact",
            "timestamp": "2024-11-03T09:00:00Z",
            "name": "Eve",
            "email": "eve@example.com",
            "message": None,
        },
    ]
}


def test_partial_legacy_submissions_are_imported(db_session):
    report = migrate_all(db_session, LocalStorage.from_export(LEGACY_SUBMISSIONS))

    assert report.form_submissions.success
    assert report.form_submissions.count == 2

    gift = crud_submissions.get_by_id(db_session, "g1").unwrap()
    assert gift.recipient_name == ""
    assert gift.recipient_email == ""
    assert gift.payment_app_username == ""
    assert gift.is_processed is True
    assert crud_submissions.get_by_id(db_session, "c1").unwrap().message == ""

    again = migrate_all(db_session, LocalStorage.from_export(LEGACY_SUBMISSIONS))
    assert again.form_submissions.updated == 2
    assert crud_submissions.get_by_id(db_session, "g1").unwrap().is_processed is True


def test_form_payloads_still_require_recipient_details():
    with pytest.raises(ValidationError):
        schemas.GiftCertificateSubmissionCreate(name="Dee", email="dee@example.com", amount="50")
