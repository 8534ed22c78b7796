"""Shared FastAPI dependencies.

Learn: Process-wide objects (the duplicate card cache, the CubeCobra rate
limiter and client) are built once in create_app() and hung on
app.state. Routes reach them through these dependencies, so tests can
swap any of them with app.dependency_overrides.

The RequestMemo lives on request.state instead: one per inbound request.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from dynasty_cube.cache import DraftCache, RequestMemo
from dynasty_cube.cubecobra import CubeCobraClient
from dynasty_cube.db.engine import get_db
from dynasty_cube.realtime.pubsub import publish_draft_event
from dynasty_cube.services.draft_service import Broadcaster, DraftService
from dynasty_cube.services.pool_service import PoolService
from dynasty_cube.services.rating_service import RatingService


def get_draft_cache(request: Request) -> DraftCache:
    return request.app.state.draft_cache


def get_cubecobra_client(request: Request) -> CubeCobraClient:
    return request.app.state.cubecobra


def get_request_memo(request: Request) -> RequestMemo:
    memo = getattr(request.state, "memo", None)
    if memo is None:
        memo = RequestMemo()
        request.state.memo = memo
    return memo


def get_broadcaster() -> Broadcaster:
    return publish_draft_event


def get_pool_service(
    db: AsyncSession = Depends(get_db),
    cache: DraftCache = Depends(get_draft_cache),
    memo: RequestMemo = Depends(get_request_memo),
) -> PoolService:
    return PoolService(db, cache, memo)


def get_draft_service(
    db: AsyncSession = Depends(get_db),
    pool: PoolService = Depends(get_pool_service),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> DraftService:
    return DraftService(db, pool, broadcaster)


def get_rating_service(
    db: AsyncSession = Depends(get_db),
    pool: PoolService = Depends(get_pool_service),
    cubecobra: CubeCobraClient = Depends(get_cubecobra_client),
) -> RatingService:
    return RatingService(db, pool, cubecobra)
