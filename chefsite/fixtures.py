"""Static content shown when the database cannot be read.

Routers substitute these lists for a failed read::

    crud_events.get_all(db).unwrap_or(fixtures.EVENTS)

Users and form submissions have no fixtures; their lists fall back to empty.
"""

from datetime import date, datetime, timezone
from typing import Iterable, Optional, TypeVar

from .schemas import BlogPostOut, EventCategoryOut, EventOut, RecipeOut, TestimonialOut

T = TypeVar("T")


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


EVENT_CATEGORIES: list[EventCategoryOut] = [
    EventCategoryOut(
        id="1",
        name="Cooking Classes",
        slug="cooking-classes",
        description="Hands-on classes for every skill level.",
        color="#4A5568",
    ),
    EventCategoryOut(
        id="2",
        name="Private Dining",
        slug="private-dining",
        description="Custom dinners served in your home.",
        color="#F56565",
    ),
]

EVENTS: list[EventOut] = [
    EventOut(
        id="1",
        title="Cooking Class: Italian Cuisine",
        description="Learn to cook authentic Italian dishes with Chef Margaret.",
        date=date(2023, 12, 15),
        time="6:00 PM - 9:00 PM",
        location="Oak Cliff Community Center",
        featured_image="/cooking-class.png",
        created_at=_utc(2023, 11, 1),
    ),
    EventOut(
        id="2",
        title="Private Dinner Experience",
        description="Enjoy a customized fine dining experience in your home.",
        date=date(2023, 12, 20),
        time="7:00 PM - 10:00 PM",
        location="Client's Residence",
        featured_image="/private-dinner.png",
        created_at=_utc(2023, 11, 5),
    ),
    EventOut(
        id="3",
        title="Holiday Cooking Workshop",
        description="Special holiday-themed cooking workshop for festive meals.",
        date=date(2023, 12, 10),
        time="2:00 PM - 5:00 PM",
        location="Oak Cliff Culinary Studio",
        featured_image="/holiday-cooking.png",
        created_at=_utc(2023, 11, 10),
    ),
]

TESTIMONIALS: list[TestimonialOut] = [
    TestimonialOut(
        id="1",
        name="John Doe",
        text="Chef Margaret's culinary creations are simply outstanding!",
        created_at=_utc(2023, 10, 15),
    ),
    TestimonialOut(
        id="2",
        name="Jane Smith",
        text="The private dinner Chef Margaret prepared for us was unforgettable.",
        created_at=_utc(2023, 10, 20),
    ),
    TestimonialOut(
        id="3",
        name="Mike Johnson",
        text="I learned so much in Chef Margaret's cooking class. Highly recommended!",
        created_at=_utc(2023, 11, 5),
    ),
]

RECIPES: list[RecipeOut] = [
    RecipeOut(
        id="1",
        title="Texas-Style Beef Brisket",
        slug="texas-style-beef-brisket",
        featured_image="/placeholder.svg",
        description="A classic Texas BBQ dish with a smoky, peppery bark and tender meat",
        ingredients=[
            "5-6 pound beef brisket, flat cut",
            "2 tablespoons kosher salt",
            "2 tablespoons coarse black pepper",
            "1 tablespoon garlic powder",
            "1 tablespoon onion powder",
        ],
        instructions=[
            "Trim excess fat from the brisket, leaving about 1/4 inch of fat cap",
            "Mix the salt, pepper, garlic powder, and onion powder in a bowl",
            "Rub the spice mixture all over the brisket",
            "Let the brisket sit at room temperature for 1 hour",
            "Preheat smoker to 225°F",
            "Smoke the brisket for 8-10 hours until internal temperature reaches 203°F",
            "Let rest for 30 minutes before slicing against the grain",
        ],
        prep_time=30,
        cook_time=600,
        servings=8,
        cuisine="Texan",
        difficulty="medium",
        tags=["beef", "bbq", "smoker", "texan", "dinner"],
        published_date=_utc(2023, 5, 15, 10),
        featured=True,
    ),
    RecipeOut(
        id="2",
        title="Southern Peach Cobbler",
        slug="southern-peach-cobbler",
        featured_image="/placeholder.svg",
        description="A classic Southern dessert featuring sweet peaches and a buttery crust",
        ingredients=[
            "8 ripe peaches, peeled and sliced",
            "1 cup all-purpose flour",
            "1 cup sugar, divided",
            "1 teaspoon baking powder",
            "1/2 teaspoon salt",
            "1/2 cup cold butter, cubed",
            "1/4 cup boiling water",
            "Ground cinnamon",
        ],
        instructions=[
            "Preheat oven to 375°F",
            "Place peaches in a greased 8-inch square baking dish and sprinkle with 1/2 cup sugar",
            "In a bowl, combine flour, remaining sugar, baking powder, and salt",
            "Cut in butter until mixture resembles coarse crumbs",
            "Stir in water just until moistened",
            "Drop spoonfuls of dough over the peaches",
            "Sprinkle with cinnamon",
            "Bake for 45 minutes until golden brown",
        ],
        prep_time=20,
        cook_time=45,
        servings=8,
        cuisine="Southern",
        difficulty="easy",
        tags=["dessert", "peach", "southern", "baking"],
        published_date=_utc(2023, 6, 20, 14),
        featured=False,
    ),
]

BLOG_POSTS: list[BlogPostOut] = [
    BlogPostOut(
        id="1",
        title="5 Essential Kitchen Tools Every Home Chef Needs",
        slug="essential-kitchen-tools",
        featured_image="/placeholder.svg",
        excerpt=(
            "Discover the must-have tools that will elevate your cooking game and make "
            "meal preparation a breeze."
        ),
        content=(
            "# 5 Essential Kitchen Tools Every Home Chef Needs\n\n"
            "A high-quality chef's knife, a cast iron skillet, a digital kitchen scale, "
            "stainless steel mixing bowls and a heat-resistant silicone spatula. Master "
            "these essentials first, then add specialized tools as you expand your "
            "cooking repertoire.\n\nHappy cooking!\n"
        ),
        published_date=_utc(2023, 4, 10, 9),
        tags=["kitchen tools", "cooking tips", "equipment"],
        category="Kitchen Essentials",
        featured=True,
    ),
    BlogPostOut(
        id="2",
        title="The Art of Food Plating: How to Make Your Dishes Look Professional",
        slug="art-of-food-plating",
        featured_image="/placeholder.svg",
        excerpt=(
            "Learn the techniques professional chefs use to transform ordinary meals into "
            "visually stunning culinary creations."
        ),
        content=(
            "# The Art of Food Plating\n\n"
            "They say we eat with our eyes first. Choose the right canvas, plate in odd "
            "numbers, build height, leave negative space and finish with fresh herbs.\n"
        ),
        published_date=_utc(2023, 5, 2, 11),
        tags=["plating", "presentation", "cooking tips"],
        category="Techniques",
        featured=False,
    ),
]


def find_by_id(items: Iterable[T], item_id: str) -> Optional[T]:
    """Return the fixture with ``id == item_id``, if any."""
    return next((item for item in items if item.id == item_id), None)


def find_by_slug(items: Iterable[T], slug: str) -> Optional[T]:
    """Return the fixture with ``slug == slug``, if any."""
    return next((item for item in items if item.slug == slug), None)


def upcoming_events(today: date, limit: int = 3) -> list[EventOut]:
    """Fixture events dated ``today`` or later, soonest first."""
    return sorted((e for e in EVENTS if e.date >= today), key=lambda e: e.date)[:limit]


def featured(items: Iterable[T], limit: int = 3) -> list[T]:
    return [item for item in items if item.featured][:limit]


def tagged(items: Iterable[T], tag: str) -> list[T]:
    wanted = tag.strip().lower()
    return [item for item in items if any(t.strip().lower() == wanted for t in item.tags)]
