"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running
and its dependencies (Postgres, Redis) are reachable. Redis only
powers the live draft board, so a missing Redis reports "degraded"
rather than failing the check.
"""

from fastapi import APIRouter
from sqlalchemy import text

from dynasty_cube import __version__
from dynasty_cube.db.engine import engine
from dynasty_cube.realtime.pubsub import get_redis

router = APIRouter()


@router.get("/health")
async def health_check():
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["postgres"] = "ok"
    except Exception as e:
        checks["postgres"] = f"error: {e}"

    try:
        await get_redis().ping()
        checks["redis"] = "ok"
    except Exception as e:
        checks["redis"] = f"error: {e}"

    status = "healthy" if all(
        v == "ok" for k, v in checks.items() if k != "version"
    ) else "degraded"

    return {"status": status, **checks}
