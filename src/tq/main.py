"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from redis.exceptions import RedisError

from tq.accounts.router import router as accounts_router
from tq.config import get_settings
from tq.database import close_db, create_schema, init_db
from tq.gamification.router import router as gamification_router
from tq.health.router import router as health_router
from tq.middleware import setup_middleware
from tq.redis_client import close_redis, get_redis, init_redis
from tq.rewards.router import router as rewards_router
from tq.tasks.router import router as tasks_router
from tq.wellness.router import router as wellness_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.auto_create_schema:
        await create_schema()

    if await init_redis(settings.redis_url):
        try:
            await get_redis().ping()
        except (RedisError, OSError):
            logger.warning("Redis unreachable at startup; rate limiting and events degrade", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Therapy Quest API",
        description="Gamification economy for the Therapy Quest wellness app",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(accounts_router)
    app.include_router(tasks_router)
    app.include_router(rewards_router)
    app.include_router(wellness_router)
    app.include_router(gamification_router)

    return app


app = create_app()
