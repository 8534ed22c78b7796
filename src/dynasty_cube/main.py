"""FastAPI application factory.

Learn: create_app() builds the per-process objects that must outlive a
request and hangs them on app.state:
- draft_cache: duplicate card ids in the pool
- rate_limiter: spaces out every CubeCobra request made by this process
- cubecobra: the HTTP client that waits on it

Lifespan connects Redis (optional: without it picks still work, only the
live board goes quiet) and closes everything on shutdown.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dynasty_cube import __version__
from dynasty_cube.api import api_router
from dynasty_cube.cache import DraftCache
from dynasty_cube.config import settings
from dynasty_cube.cubecobra import CubeCobraClient, RateLimiter
from dynasty_cube.middleware.request_context import RequestContextMiddleware
from dynasty_cube.middleware.security import SecurityHeadersMiddleware
from dynasty_cube.realtime.pubsub import close_redis, init_redis
from dynasty_cube.realtime.sse import router as stream_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Anything before `yield` runs at startup, after `yield` at shutdown."""
    logger.info(
        "dynasty_cube.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    try:
        await init_redis()
        logger.info("dynasty_cube.redis_connected", url=settings.redis_url)
    except Exception as e:
        logger.warning("dynasty_cube.redis_unavailable", error=str(e))

    yield

    logger.info("dynasty_cube.shutdown")
    await app.state.cubecobra.aclose()
    await close_redis()

    from dynasty_cube.db.engine import dispose_engine
    await dispose_engine()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Dynasty Cube",
        description="Draft league backend: card pool, live draft, CubeCobra ratings",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.draft_cache = DraftCache()
    app.state.rate_limiter = RateLimiter(settings.cubecobra_request_delay_seconds)
    app.state.cubecobra = CubeCobraClient(rate_limiter=app.state.rate_limiter)

    # ── Middleware stack ──────────────────────────────────────
    # Starlette runs middleware in reverse order of registration:
    # RequestContext → Security → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(api_router)
    app.include_router(stream_router, prefix="/api", tags=["draft-stream"])

    return app


# Default app instance (used by uvicorn: dynasty_cube.main:app)
app = create_app()
