"""
Main application entry point for the chef site content API.

This module configures logging, initializes the FastAPI application,
configures CORS, registers the data layer exception handlers and includes
the routers for events, content, users, form submissions and
administration.

Modules:
- FastAPI: Web framework
- CORSMiddleware: Middleware for handling CORS
- chefsite.database: Database engine
- chefsite.models: SQLAlchemy models
- chefsite.events: Events and event categories router
- chefsite.content: Recipes, blog, testimonials and Instagram feed routers
- chefsite.users: Users router
- chefsite.submissions: Form submissions router
- chefsite.admin: Settings, theme, stats and migration router
- chefsite.core: Application settings
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chefsite import admin, content, events, models, submissions, users
from chefsite.core import get_settings
from chefsite.database import engine
from chefsite.handlers import register_exception_handlers
from chefsite.logs import configure_logging, get_logger

settings = get_settings()
configure_logging(
    level=settings.LOG_LEVEL,
    json_format=settings.LOG_JSON,
    service=settings.SERVICE_NAME,
)
logger = get_logger(__name__)

# Create tables (for development only)
if engine is not None:
    models.Base.metadata.create_all(bind=engine)
else:
    logger.warning("database_not_configured", hint="set DATABASE_URL to enable writes")

# Initialize FastAPI application
app = FastAPI(title="Chef Site Content API")

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers for application areas
app.include_router(events.router)
app.include_router(content.recipes_router)
app.include_router(content.blog_router)
app.include_router(content.testimonials_router)
app.include_router(content.instagram_router)
app.include_router(users.router)
app.include_router(submissions.router)
app.include_router(admin.router)


@app.get("/")
def root():
    """
    Root endpoint for the API.

    Returns a simple JSON message directing users to the Swagger UI.

    Returns:
        dict: JSON message with information about the API
    """
    return {"msg": "Chef Site Content API. Visit /docs for Swagger UI"}
