"""Liveness, readiness and version probes (unauthenticated, not rate limited)."""

from collections.abc import Awaitable, Callable

import structlog
from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from guild.config import get_settings
from guild.database import get_session
from guild.redis_client import get_redis

logger = structlog.get_logger()

router = APIRouter()


async def _probe(name: str, check: Callable[[], Awaitable[object]]) -> str:
    try:
        await check()
    except Exception as exc:
        logger.warning("readiness_check_failed", dependency=name, error=str(exc))
        return f"error: {exc}"
    return "ok"


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    response: Response,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, object]:
    """Report database and Redis connectivity; 503 while either is down."""

    async def database() -> object:
        return (await db.execute(text("SELECT 1"))).scalar()

    async def redis() -> object:
        return await get_redis().ping()

    checks = {
        "database": await _probe("database", database),
        "redis": await _probe("redis", redis),
    }
    ready = all(v == "ok" for v in checks.values())
    if not ready:
        response.status_code = 503
    return {"status": "ready" if ready else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {"version": settings.app_version, "environment": settings.environment}
