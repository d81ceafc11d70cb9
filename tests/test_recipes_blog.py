from datetime import datetime

import pytest
from fastapi import status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from chefsite import fixtures, schemas
from chefsite.crud import blog_posts as crud_blog_posts
from chefsite.crud import recipes as crud_recipes
from chefsite.errors import NothingToUpdateError


def recipe(slug="brisket", **extra):
    data = {
        "title": "Brisket",
        "slug": slug,
        "ingredients": ["beef", "salt"],
        "instructions": ["season", "smoke"],
        "prep_time": 30,
        "cook_time": 600,
        "servings": 8,
        "difficulty": "medium",
        "tags": ["BBQ", "beef"],
        **extra,
    }
    return schemas.RecipeCreate(**data)


def post(slug="tools", **extra):
    data = {"title": "Tools", "slug": slug, "content": "# Tools", **extra}
    return schemas.BlogPostCreate(**data)


def test_recipe_lists_round_trip_through_json_columns(db_session):
    created = crud_recipes.create(db_session, recipe())
    fetched = crud_recipes.get_by_slug(db_session, "brisket").unwrap()

    assert fetched.id == created.id
    assert fetched.ingredients == ["beef", "salt"]
    assert fetched.instructions == ["season", "smoke"]


def test_recipe_slug_is_unique(db_session):
    crud_recipes.create(db_session, recipe())
    with pytest.raises(IntegrityError):
        crud_recipes.create(db_session, recipe(title="Other"))


def test_recipe_by_tag_is_case_insensitive(db_session):
    crud_recipes.create(db_session, recipe())
    crud_recipes.create(db_session, recipe(slug="cobbler", tags=["dessert"]))

    assert [r.slug for r in crud_recipes.get_by_tag(db_session, "bbq").unwrap()] == ["brisket"]


def test_featured_recipes_newest_first_and_limited(db_session):
    for day in (1, 2, 3, 4):
        crud_recipes.create(
            db_session,
            recipe(slug=f"r{day}", featured=day != 2, published_date=datetime(2025, 1, day)),
        )

    featured = crud_recipes.get_featured(db_session, limit=2).unwrap()
    assert [r.slug for r in featured] == ["r4", "r3"]


def test_recipe_save_upserts_by_slug(db_session):
    first, created = crud_recipes.save(db_session, recipe())
    second, created_again = crud_recipes.save(db_session, recipe(title="Smoked Brisket"))

    assert created is True
    assert created_again is False
    assert second.id == first.id
    assert second.title == "Smoked Brisket"


def test_recipe_partial_update(db_session):
    created = crud_recipes.create(db_session, recipe())

    updated = crud_recipes.update(db_session, created.id, schemas.RecipeUpdate(servings=4))
    assert updated.servings == 4
    assert updated.title == "Brisket"

    with pytest.raises(NothingToUpdateError):
        crud_recipes.update(db_session, created.id, schemas.RecipeUpdate())


def test_blog_post_queries(db_session):
    crud_blog_posts.create(db_session, post(category="Techniques", tags=["Plating"], featured=True))
    crud_blog_posts.create(db_session, post(slug="other", category="News"))

    assert [p.slug for p in crud_blog_posts.get_by_category(db_session, "News").unwrap()] == ["other"]
    assert [p.slug for p in crud_blog_posts.get_by_tag(db_session, "plating").unwrap()] == ["tools"]
    assert [p.slug for p in crud_blog_posts.get_featured(db_session).unwrap()] == ["tools"]
    assert crud_blog_posts.delete(db_session, "missing") is False


def test_recipe_and_blog_routes(client):
    created = client.post("/recipes/", json=recipe().model_dump(mode="json"))
    assert created.status_code == status.HTTP_201_CREATED

    duplicate = client.post("/recipes/", json=recipe().model_dump(mode="json"))
    assert duplicate.status_code == status.HTTP_409_CONFLICT

    by_slug = client.get("/recipes/brisket")
    assert by_slug.json()["id"] == created.json()["id"]

    blog = client.post("/blog/", json=post().model_dump(mode="json"))
    assert blog.status_code == status.HTTP_201_CREATED
    patched = client.patch(f"/blog/{blog.json()['id']}", json={"excerpt": "Short"})
    assert patched.json()["excerpt"] == "Short"
    assert client.get("/blog/missing").status_code == status.HTTP_404_NOT_FOUND


def test_content_routes_fall_back_to_fixtures(offline_client):
    recipes = offline_client.get("/recipes/")
    assert [r["slug"] for r in recipes.json()] == [r.slug for r in fixtures.RECIPES]

    featured = offline_client.get("/blog/featured")
    assert [p["slug"] for p in featured.json()] == ["essential-kitchen-tools"]

    by_tag = offline_client.get("/recipes/tag/dessert")
    assert [r["slug"] for r in by_tag.json()] == ["southern-peach-cobbler"]


def test_blog_post_update_rules(db_session):
    created = crud_blog_posts.create(db_session, post())

    with pytest.raises(NothingToUpdateError):
        crud_blog_posts.update(db_session, created.id, schemas.BlogPostUpdate())
    with pytest.raises(ValidationError):
        schemas.BlogPostUpdate(slug="")
    with pytest.raises(ValidationError):
        schemas.RecipeUpdate(title="")

    updated = crud_blog_posts.update(db_session, created.id, schemas.BlogPostUpdate(excerpt="Short"))
    assert updated.excerpt == "Short"
    assert updated.slug == "tools"
