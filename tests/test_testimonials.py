import pytest
from fastapi import status

from chefsite import fixtures, schemas
from chefsite.crud import testimonials as crud_testimonials
from chefsite.errors import NothingToUpdateError


def test_testimonial_crud(db_session):
    created = crud_testimonials.create(
        db_session, schemas.TestimonialCreate(name="Dana", text="Wonderful dinner")
    )

    updated = crud_testimonials.update(
        db_session, created.id, schemas.TestimonialUpdate(text="Unforgettable dinner")
    )
    assert updated.name == "Dana"
    assert updated.text == "Unforgettable dinner"

    assert crud_testimonials.delete(db_session, created.id) is True
    assert crud_testimonials.get_all(db_session).unwrap() == []


def test_testimonial_routes(client):
    created = client.post("/testimonials/", json={"name": "Dana", "text": "Great class"})
    assert created.status_code == status.HTTP_201_CREATED

    listed = client.get("/testimonials/")
    assert [t["name"] for t in listed.json()] == ["Dana"]

    missing = client.patch("/testimonials/missing", json={"text": "x"})
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_testimonials_fall_back_to_fixtures(offline_client):
    listed = offline_client.get("/testimonials/")
    assert [t["name"] for t in listed.json()] == [t.name for t in fixtures.TESTIMONIALS]

    single = offline_client.get("/testimonials/3")
    assert single.json()["name"] == "Mike Johnson"


def test_testimonial_update_rules(client, db_session):
    created = crud_testimonials.create(
        db_session, schemas.TestimonialCreate(name="Dana", text="Wonderful dinner")
    )

    with pytest.raises(NothingToUpdateError):
        crud_testimonials.update(db_session, created.id, schemas.TestimonialUpdate())

    blank = client.patch(f"/testimonials/{created.id}", json={"text": ""})
    assert blank.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    empty = client.patch(f"/testimonials/{created.id}", json={})
    assert empty.status_code == status.HTTP_400_BAD_REQUEST

    listed = client.get("/testimonials/")
    assert [t["text"] for t in listed.json()] == ["Wonderful dinner"]
