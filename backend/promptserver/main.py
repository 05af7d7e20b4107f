"""PromptServer API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Fixed /api/v1/prompts/* paths (my, liked) registered before /{prompt_uuid}
    - Global error handlers map PromptServerError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and Redis initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: cleaner cleanup of engine and Redis pool
    - System categories seeded on startup (idempotent; disabled in tests)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from promptserver.api.error_handlers import register_error_handlers
from promptserver.api.routes import (
    auth, categories, dashboard, favorites, health, likes, my_prompts,
    prompts, tags, view_statistics, views,
)
from promptserver.config import get_settings
from promptserver.infrastructure import database
from promptserver.infrastructure.database import init_db
from promptserver.infrastructure.observability import setup_logging
from promptserver.infrastructure.redis_client import close_redis, init_redis
from promptserver.services.category_service import CategoryService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    init_redis(settings.redis_url)
    if settings.seed_system_categories:
        async with database.db_manager.session() as db:
            await CategoryService(db).seed_system_categories()
    logger.info("PromptServer API started")
    yield
    logger.info("PromptServer API shutting down")
    await close_redis()
    await database.db_manager.dispose()


app = FastAPI(
    title="PromptServer API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(categories.router)
app.include_router(tags.router)
app.include_router(my_prompts.router)
app.include_router(likes.router)
app.include_router(dashboard.router)
app.include_router(view_statistics.router)
app.include_router(favorites.router)
app.include_router(views.router)
app.include_router(prompts.router)

register_error_handlers(app)
