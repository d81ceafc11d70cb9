"""Recipe, blog post, testimonial and Instagram feed routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from . import fixtures, schemas
from .crud import blog_posts as crud_blog_posts
from .crud import recipes as crud_recipes
from .crud import testimonials as crud_testimonials
from .database import get_db
from .instagram import FeedFetcher, InstagramPost, get_feed, get_feed_fetcher
from .site_settings import DatabaseSettingsStore

recipes_router = APIRouter(prefix="/recipes", tags=["recipes"])
blog_router = APIRouter(prefix="/blog", tags=["blog"])
testimonials_router = APIRouter(prefix="/testimonials", tags=["testimonials"])
instagram_router = APIRouter(prefix="/instagram", tags=["instagram"])


@recipes_router.get("/", response_model=List[schemas.RecipeOut])
def list_recipes(db: Session = Depends(get_db)):
    """
    Retrieve all recipes, most recently published first.

    Returns:
        list[RecipeOut]: Recipes, or the fixture recipes when the database
        cannot be read.
    """
    return crud_recipes.get_all(db).unwrap_or(fixtures.RECIPES)


@recipes_router.get("/featured", response_model=List[schemas.RecipeOut])
def featured_recipes(limit: int = Query(3, ge=1, le=50), db: Session = Depends(get_db)):
    return crud_recipes.get_featured(db, limit).unwrap_or_else(
        lambda error: fixtures.featured(fixtures.RECIPES, limit)
    )


@recipes_router.get("/tag/{tag}", response_model=List[schemas.RecipeOut])
def recipes_by_tag(tag: str, db: Session = Depends(get_db)):
    return crud_recipes.get_by_tag(db, tag).unwrap_or_else(
        lambda error: fixtures.tagged(fixtures.RECIPES, tag)
    )


@recipes_router.get("/{slug}", response_model=schemas.RecipeOut)
def get_recipe(slug: str, db: Session = Depends(get_db)):
    """
    Retrieve a recipe by slug.

    Raises:
        HTTPException: If the recipe is not found.
    """
    recipe = crud_recipes.get_by_slug(db, slug).unwrap_or_else(
        lambda error: fixtures.find_by_slug(fixtures.RECIPES, slug)
    )
    if not recipe:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


@recipes_router.post("/", response_model=schemas.RecipeOut, status_code=status.HTTP_201_CREATED)
def create_recipe(recipe_in: schemas.RecipeCreate, db: Session = Depends(get_db)):
    """
    Create a recipe.

    A slug that is already taken is reported as ``409 Conflict``.
    """
    return crud_recipes.create(db, recipe_in)


@recipes_router.patch("/{recipe_id}", response_model=schemas.RecipeOut)
def patch_recipe(recipe_id: str, changes: schemas.RecipeUpdate, db: Session = Depends(get_db)):
    recipe = crud_recipes.update(db, recipe_id, changes)
    if not recipe:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


@recipes_router.delete("/{recipe_id}")
def remove_recipe(recipe_id: str, db: Session = Depends(get_db)):
    if not crud_recipes.delete(db, recipe_id):
        raise HTTPException(status_code=404, detail="Recipe not found")
    return {"ok": True}


@blog_router.get("/", response_model=List[schemas.BlogPostOut])
def list_blog_posts(db: Session = Depends(get_db)):
    """
    Retrieve all blog posts, most recently published first.

    Returns:
        list[BlogPostOut]: Posts, or the fixture posts when the database
        cannot be read.
    """
    return crud_blog_posts.get_all(db).unwrap_or(fixtures.BLOG_POSTS)


@blog_router.get("/featured", response_model=List[schemas.BlogPostOut])
def featured_blog_posts(limit: int = Query(3, ge=1, le=50), db: Session = Depends(get_db)):
    return crud_blog_posts.get_featured(db, limit).unwrap_or_else(
        lambda error: fixtures.featured(fixtures.BLOG_POSTS, limit)
    )


@blog_router.get("/tag/{tag}", response_model=List[schemas.BlogPostOut])
def blog_posts_by_tag(tag: str, db: Session = Depends(get_db)):
    return crud_blog_posts.get_by_tag(db, tag).unwrap_or_else(
        lambda error: fixtures.tagged(fixtures.BLOG_POSTS, tag)
    )


@blog_router.get("/category/{category}", response_model=List[schemas.BlogPostOut])
def blog_posts_by_category(category: str, db: Session = Depends(get_db)):
    return crud_blog_posts.get_by_category(db, category).unwrap_or_else(
        lambda error: [p for p in fixtures.BLOG_POSTS if p.category == category]
    )


@blog_router.get("/{slug}", response_model=schemas.BlogPostOut)
def get_blog_post(slug: str, db: Session = Depends(get_db)):
    post = crud_blog_posts.get_by_slug(db, slug).unwrap_or_else(
        lambda error: fixtures.find_by_slug(fixtures.BLOG_POSTS, slug)
    )
    if not post:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return post


@blog_router.post("/", response_model=schemas.BlogPostOut, status_code=status.HTTP_201_CREATED)
def create_blog_post(post_in: schemas.BlogPostCreate, db: Session = Depends(get_db)):
    return crud_blog_posts.create(db, post_in)


@blog_router.patch("/{post_id}", response_model=schemas.BlogPostOut)
def patch_blog_post(post_id: str, changes: schemas.BlogPostUpdate, db: Session = Depends(get_db)):
    post = crud_blog_posts.update(db, post_id, changes)
    if not post:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return post


@blog_router.delete("/{post_id}")
def remove_blog_post(post_id: str, db: Session = Depends(get_db)):
    if not crud_blog_posts.delete(db, post_id):
        raise HTTPException(status_code=404, detail="Blog post not found")
    return {"ok": True}


@testimonials_router.get("/", response_model=List[schemas.TestimonialOut])
def list_testimonials(db: Session = Depends(get_db)):
    return crud_testimonials.get_all(db).unwrap_or(fixtures.TESTIMONIALS)


@testimonials_router.get("/{testimonial_id}", response_model=schemas.TestimonialOut)
def get_testimonial(testimonial_id: str, db: Session = Depends(get_db)):
    testimonial = crud_testimonials.get_by_id(db, testimonial_id).unwrap_or_else(
        lambda error: fixtures.find_by_id(fixtures.TESTIMONIALS, testimonial_id)
    )
    if not testimonial:
        raise HTTPException(status_code=404, detail="Testimonial not found")
    return testimonial


@testimonials_router.post(
    "/", response_model=schemas.TestimonialOut, status_code=status.HTTP_201_CREATED
)
def create_testimonial(testimonial_in: schemas.TestimonialCreate, db: Session = Depends(get_db)):
    return crud_testimonials.create(db, testimonial_in)


@testimonials_router.patch("/{testimonial_id}", response_model=schemas.TestimonialOut)
def patch_testimonial(
    testimonial_id: str,
    changes: schemas.TestimonialUpdate,
    db: Session = Depends(get_db),
):
    testimonial = crud_testimonials.update(db, testimonial_id, changes)
    if not testimonial:
        raise HTTPException(status_code=404, detail="Testimonial not found")
    return testimonial


@testimonials_router.delete("/{testimonial_id}")
def remove_testimonial(testimonial_id: str, db: Session = Depends(get_db)):
    if not crud_testimonials.delete(db, testimonial_id):
        raise HTTPException(status_code=404, detail="Testimonial not found")
    return {"ok": True}


@instagram_router.get("/", response_model=List[InstagramPost])
def instagram_feed(
    request: Request,
    db: Session = Depends(get_db),
    fetch: Optional[FeedFetcher] = Depends(get_feed_fetcher),
):
    """
    Posts for the Instagram section.

    The feed cache lives on ``app.state`` and is replaced by the one
    :func:`~chefsite.instagram.get_feed` returns.

    Returns:
        list[InstagramPost]: At most ``instagram.displayCount`` posts;
        placeholders when no token or client is configured.
    """
    settings = DatabaseSettingsStore(db).get()
    cache = getattr(request.app.state, "instagram_cache", None)
    posts, cache = get_feed(settings, cache, fetch)
    request.app.state.instagram_cache = cache
    return posts
