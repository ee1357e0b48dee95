"""Liveness and readiness probes.

Readiness covers the two stores generation depends on: the schedule database
and the lease store. Unconfigured stores run in memory and always pass.
"""

from typing import Any

import redis
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from tripsync.config import Settings, get_settings
from tripsync.db.engine import create_engine_from_settings

router = APIRouter()

Check = tuple[bool, str]


async def check_db(settings: Settings) -> Check:
    if not settings.database_url:
        return (True, "in_memory")

    engine = None
    try:
        engine = create_engine_from_settings(settings)
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")
    finally:
        if engine is not None:
            engine.dispose()


async def check_redis(settings: Settings) -> Check:
    if not settings.redis_url:
        return (True, "in_memory")

    try:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        client.ping()
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe; 200 whenever the process is up."""
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | JSONResponse:
    """Readiness probe: 200 when every component is reachable, else 503."""
    settings = get_settings()
    results = {
        "db": await check_db(settings),
        "redis": await check_redis(settings),
    }

    healthy = all(ok for ok, _ in results.values())
    body = {
        "status": "ok" if healthy else "degraded",
        "components": {name: detail for name, (_, detail) in results.items()},
    }
    if not healthy:
        return JSONResponse(content=body, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return body
