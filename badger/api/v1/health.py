from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from badger.config import settings
from badger.db.base import engine

router = APIRouter(prefix="/v1", tags=["Health"])
log = logging.getLogger(__name__)


@router.get("/health")
async def readiness() -> dict[str, str]:
    """Checks the database and the Celery broker."""
    out: dict[str, str] = {}

    # DB
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        out["db"] = "ok"
    except SQLAlchemyError as exc:
        log.exception("DB health check failed")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="db error") from exc

    # Broker
    r = Redis.from_url(settings.CELERY_BROKER_URL, socket_connect_timeout=2)
    try:
        if not await r.ping():
            raise RedisError("ping returned false")
        out["broker"] = "ok"
    except (RedisError, OSError) as exc:
        log.exception("Redis health check failed")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="broker error") from exc
    finally:
        await r.aclose()

    return out
