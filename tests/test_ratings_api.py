"""CubeCobra ELO routes: single-card lookup and the rating sync."""

import pytest

from conftest import add_pool_card, cube_card, cube_json
from dynasty_cube.db.models import TeamDraftPick


@pytest.fixture()
def dynasty_cube(cube_responses):
    cube_responses["dynasty"] = (200, cube_json([
        cube_card("Lightning Bolt", elo=1650.5),
        cube_card("Sol Ring", elo=1820),
        cube_card("Brainstorm"),
    ]))


# ─── Single card ────────────────────────────────────────


@pytest.mark.asyncio
async def test_card_elo(client, dynasty_cube):
    r = await client.get("/api/v1/cubes/dynasty/cards/lightning bolt/elo")
    assert r.status_code == 200
    assert r.json() == {
        "card_name": "lightning bolt",
        "cube_id": "dynasty",
        "cube_name": "Dynasty Cube",
        "elo": 1651,
    }


@pytest.mark.asyncio
async def test_card_elo_split_card_name(client, cube_responses):
    cube_responses["dynasty"] = (200, cube_json([cube_card("Fire // Ice", elo=1700)]))
    r = await client.get("/api/v1/cubes/dynasty/cards/Fire // Ice/elo")
    assert r.status_code == 200
    assert r.json()["elo"] == 1700


@pytest.mark.asyncio
async def test_card_without_elo_404(client, dynasty_cube):
    r = await client.get("/api/v1/cubes/dynasty/cards/Brainstorm/elo")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_card_elo_unknown_cube_404(client):
    r = await client.get("/api/v1/cubes/missing/cards/Sol Ring/elo")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_card_elo_upstream_failure_502(client, cube_responses):
    cube_responses["dynasty"] = (500, {})
    r = await client.get("/api/v1/cubes/dynasty/cards/Sol Ring/elo")
    assert r.status_code == 502


# ─── Sync ───────────────────────────────────────────────


@pytest.mark.asyncio
async def test_sync_updates_pool_and_picks(client, db_session, teams, dynasty_cube):
    bolt = await add_pool_card(db_session, "bolt", "Lightning Bolt")
    await add_pool_card(db_session, "ring", "sol ring")
    await add_pool_card(db_session, "goyf", "Tarmogoyf")
    db_session.add(TeamDraftPick(
        team_id="shards", card_pool_id=bolt.id, card_id="bolt",
        card_name="Lightning Bolt", pick_number=1,
    ))
    await db_session.commit()

    r = await client.post("/api/v1/ratings/sync", json={"cube_id": "dynasty"})
    assert r.status_code == 200
    result = r.json()
    assert result["success"] is True
    assert result["pool"]["updated_count"] == 2
    assert result["pool"]["not_found_count"] == 1
    assert result["picks"]["updated_count"] == 1
    assert result["message"] == "CubeCobra ELO Sync: 3 updated, 1 not found, 0 errors"

    r = await client.get("/api/v1/pool/cards")
    elos = {c["card_name"]: c["cubecobra_elo"] for c in r.json()}
    assert elos == {"Lightning Bolt": 1651, "sol ring": 1820, "Tarmogoyf": None}

    r = await client.get("/api/v1/teams/shards/picks")
    assert r.json()[0]["cubecobra_elo"] == 1651


@pytest.mark.asyncio
async def test_sync_unknown_cube_reports_failure(client):
    r = await client.post("/api/v1/ratings/sync", json={"cube_id": "missing"})
    assert r.status_code == 200
    assert r.json()["success"] is False
    assert r.json()["pool"] is None


@pytest.mark.asyncio
async def test_sync_cube_without_elo_reports_failure(client, cube_responses):
    cube_responses["dynasty"] = (200, cube_json([cube_card("Brainstorm")]))
    r = await client.post("/api/v1/ratings/sync", json={"cube_id": "dynasty"})
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_sync_requires_cube_id(client, monkeypatch):
    from dynasty_cube.config import settings

    monkeypatch.setattr(settings, "default_cube_id", "")
    r = await client.post("/api/v1/ratings/sync", json={})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_sync_falls_back_to_default_cube(client, monkeypatch, dynasty_cube, cubecobra_requests):
    from dynasty_cube.config import settings

    monkeypatch.setattr(settings, "default_cube_id", "dynasty")
    r = await client.post("/api/v1/ratings/sync", json={})
    assert r.status_code == 200
    assert cubecobra_requests[0].url.path.endswith("/cubeJSON/dynasty")
