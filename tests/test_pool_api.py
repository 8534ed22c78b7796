"""Card pool API tests."""

import uuid

import pytest

from conftest import add_pool_card, cube_card, cube_json
from dynasty_cube.db.models import TeamDraftPick


def _card(card_id: str, name: str, **extra) -> dict:
    return {"card_id": card_id, "card_name": name, **extra}


@pytest.mark.asyncio
async def test_add_and_list_cards(client):
    r = await client.post("/api/v1/pool/cards", json={"cards": [
        _card("bolt", "Lightning Bolt", rarity="common", colors=["R"], cmc=1),
        _card("ring", "Sol Ring"),
    ]})
    assert r.status_code == 201
    added = r.json()
    assert len(added) == 2
    assert added[0]["pool_name"] == "default"
    assert added[0]["colors"] == ["R"]

    r = await client.get("/api/v1/pool/cards")
    assert r.status_code == 200
    names = [c["card_name"] for c in r.json()]
    assert names == ["Lightning Bolt", "Sol Ring"]
    assert all(c["is_drafted"] is False for c in r.json())


@pytest.mark.asyncio
async def test_add_cards_requires_at_least_one(client):
    r = await client.post("/api/v1/pool/cards", json={"cards": []})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_list_cards_filters_by_pool_name(client):
    await client.post("/api/v1/pool/cards", json={"cards": [
        _card("bolt", "Lightning Bolt", pool_name="season-1"),
        _card("ring", "Sol Ring", pool_name="season-2"),
    ]})
    r = await client.get("/api/v1/pool/cards", params={"pool_name": "season-2"})
    assert [c["card_name"] for c in r.json()] == ["Sol Ring"]


@pytest.mark.asyncio
async def test_drafted_cards_are_marked_and_not_available(client, db_session, teams):
    bolt = await add_pool_card(db_session, "bolt", "Lightning Bolt")
    await add_pool_card(db_session, "ring", "Sol Ring")
    db_session.add(TeamDraftPick(
        team_id="shards", card_pool_id=bolt.id, card_id="bolt",
        card_name="Lightning Bolt", pick_number=1,
    ))
    await db_session.commit()

    r = await client.get("/api/v1/pool/cards")
    by_name = {c["card_name"]: c for c in r.json()}
    assert by_name["Lightning Bolt"]["is_drafted"] is True
    assert by_name["Lightning Bolt"]["drafted_by_team_id"] == "shards"
    assert by_name["Sol Ring"]["is_drafted"] is False

    r = await client.get("/api/v1/pool/available")
    assert [c["card_name"] for c in r.json()] == ["Sol Ring"]


@pytest.mark.asyncio
async def test_duplicates_endpoint_tracks_pool_writes(client):
    await client.post("/api/v1/pool/cards", json={"cards": [
        _card("bolt", "Lightning Bolt"),
        _card("ring", "Sol Ring"),
    ]})
    r = await client.get("/api/v1/pool/duplicates")
    assert r.json() == {"card_ids": [], "count": 0}

    r = await client.post("/api/v1/pool/cards", json={"cards": [_card("bolt", "Lightning Bolt")]})
    second_bolt = r.json()[0]["id"]
    r = await client.get("/api/v1/pool/duplicates")
    assert r.json() == {"card_ids": ["bolt"], "count": 1}

    r = await client.delete(f"/api/v1/pool/cards/{second_bolt}")
    assert r.status_code == 204
    r = await client.get("/api/v1/pool/duplicates")
    assert r.json()["card_ids"] == []


@pytest.mark.asyncio
async def test_delete_unknown_card_404(client):
    r = await client.delete(f"/api/v1/pool/cards/{uuid.uuid4()}")
    assert r.status_code == 404


# ─── Cube import ────────────────────────────────────────


@pytest.mark.asyncio
async def test_import_cube(client, cube_responses):
    cube_responses["dynasty"] = (200, cube_json([
        cube_card("Lightning Bolt", elo=1650, scryfall_id="bolt-1", set="lea", rarity="common"),
        cube_card("Brainstorm", scryfall_id="bs-1"),
        {"cardID": None, "details": {"name": "Mystery Card"}},
    ]))

    r = await client.post("/api/v1/pool/import-cube", json={"cube_id": "dynasty", "pool_name": "s1"})
    assert r.status_code == 201
    assert r.json() == {"cube_name": "Dynasty Cube", "imported": 2, "skipped": 1}

    r = await client.get("/api/v1/pool/cards", params={"pool_name": "s1"})
    cards = {c["card_name"]: c for c in r.json()}
    assert cards["Lightning Bolt"]["card_id"] == "bolt-1"
    assert cards["Lightning Bolt"]["cubecobra_elo"] == 1650
    assert cards["Lightning Bolt"]["card_set"] == "lea"
    assert cards["Brainstorm"]["cubecobra_elo"] is None


@pytest.mark.asyncio
async def test_import_unknown_cube_404(client):
    r = await client.post("/api/v1/pool/import-cube", json={"cube_id": "missing"})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_import_cube_upstream_failure_502(client, cube_responses):
    cube_responses["dynasty"] = (500, {})
    r = await client.post("/api/v1/pool/import-cube", json={"cube_id": "dynasty"})
    assert r.status_code == 502
