"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from guild.accounts.router import admin_router as accounts_admin_router
from guild.accounts.router import me_router
from guild.attendance.router import router as attendance_router
from guild.config import get_settings
from guild.database import close_db, init_db
from guild.health.router import router as health_router
from guild.middleware import setup_middleware
from guild.profiles.router import router as profiles_router
from guild.programs.router import router as programs_router
from guild.promotion.router import router as promotion_router
from guild.redis_client import close_redis, init_redis
from guild.submissions.router import admin_router as submissions_admin_router
from guild.submissions.router import router as submissions_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Open and close the database engine and the Redis pool."""
    settings = get_settings()
    await init_db(settings.database_url, echo=settings.debug)
    await init_redis(settings.redis_url)
    logger.info("app_started", environment=settings.environment, version=settings.app_version)

    yield

    await close_db()
    await close_redis()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Guild Membership API",
        description="Membership lifecycle, authorization and promotion eligibility",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(me_router)
    app.include_router(profiles_router)
    app.include_router(accounts_admin_router)
    app.include_router(promotion_router)
    app.include_router(programs_router)
    app.include_router(attendance_router)
    app.include_router(submissions_router)
    app.include_router(submissions_admin_router)

    return app


app = create_app()
