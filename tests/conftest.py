"""Test fixtures — an isolated in-memory database per test, no network.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets a fresh in-memory SQLite database (aiosqlite), built by
   the same build_engine() the app uses. For SQLite it picks a StaticPool,
   so every session sees the same data.
2. The models use portable column types (Uuid, JSON), so
   Base.metadata.create_all builds the same schema the migrations do.
3. Process-wide objects (DraftCache, CubeCobra client, broadcaster) are
   swapped through app.dependency_overrides, never patched.

CubeCobra is served by httpx.MockTransport from the `cube_responses`
dict; Redis is replaced by a list that records every broadcast.
"""

import uuid

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dynasty_cube.api.dependencies import (
    get_broadcaster,
    get_cubecobra_client,
    get_draft_cache,
)
from dynasty_cube.cache import DraftCache
from dynasty_cube.cubecobra import CubeCobraClient, RateLimiter
from dynasty_cube.db.engine import build_engine, get_db, make_session_factory
from dynasty_cube.db.models import Base, CardPool, Team
from dynasty_cube.main import app

CUBECOBRA_BASE = "https://cubecobra.test/cube/api"


@pytest_asyncio.fixture()
async def db_engine():
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(db_engine):
    session = make_session_factory(db_engine)()
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture()
def draft_cache():
    return DraftCache()


@pytest.fixture()
def broadcasts():
    """Every (session_id, event, payload) the app tried to publish."""
    return []


@pytest.fixture()
def cube_responses():
    """cube_id → (status_code, json body). Unknown cubes answer 404."""
    return {}


@pytest.fixture()
def cubecobra_requests():
    return []


@pytest_asyncio.fixture()
async def cubecobra(cube_responses, cubecobra_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        cubecobra_requests.append(request)
        cube_id = request.url.path.rsplit("/", 1)[-1]
        status, body = cube_responses.get(cube_id, (404, {"message": "Cube not found"}))
        return httpx.Response(status, json=body)

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = CubeCobraClient(
        http, base_url=CUBECOBRA_BASE, rate_limiter=RateLimiter(0)
    )
    yield client
    await http.aclose()


@pytest_asyncio.fixture()
async def client(db_session, draft_cache, broadcasts, cubecobra):
    """HTTP client with the database, cache, CubeCobra and Redis overridden."""

    async def override_get_db():
        yield db_session

    async def fake_broadcast(session_id, event, payload):
        broadcasts.append((session_id, event, payload))
        return 1

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_draft_cache] = lambda: draft_cache
    app.dependency_overrides[get_cubecobra_client] = lambda: cubecobra
    app.dependency_overrides[get_broadcaster] = lambda: fake_broadcast

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ─── Data helpers ───────────────────────────────────────


def cube_json(cards: list[dict], name: str = "Dynasty Cube") -> dict:
    """A cubeJSON body with the given mainboard entries."""
    return {"name": name, "shortId": "dynasty", "cards": {"mainboard": cards, "maybeboard": []}}


def cube_card(name: str, elo=None, scryfall_id=None, **details) -> dict:
    return {
        "cardID": scryfall_id or f"card-{name.lower().replace(' ', '-')}",
        "details": {"name": name, "elo": elo, "scryfall_id": scryfall_id, **details},
    }


@pytest_asyncio.fixture()
async def teams(db_session):
    rows = [
        Team(id="shards", name="Shards", emoji="💎"),
        Team(id="ninja", name="Ninja", emoji="🥷"),
    ]
    db_session.add_all(rows)
    await db_session.commit()
    return {t.id: t for t in rows}


async def add_pool_card(db_session, card_id: str, card_name: str, **fields) -> CardPool:
    """Insert a pool row directly, bypassing PoolService (no cache invalidation)."""
    card = CardPool(id=uuid.uuid4(), card_id=card_id, card_name=card_name, **fields)
    db_session.add(card)
    await db_session.commit()
    return card
