"""Team API tests."""

import pytest


@pytest.mark.asyncio
async def test_create_and_list_teams(client):
    r = await client.post("/api/v1/teams", json={"id": "shards", "name": "Shards", "emoji": "💎"})
    assert r.status_code == 201
    assert r.json()["emoji"] == "💎"

    await client.post("/api/v1/teams", json={"id": "ninja", "name": "Ninja"})
    r = await client.get("/api/v1/teams")
    assert [t["id"] for t in r.json()] == ["ninja", "shards"]


@pytest.mark.asyncio
async def test_duplicate_team_id_409(client):
    await client.post("/api/v1/teams", json={"id": "shards", "name": "Shards"})
    r = await client.post("/api/v1/teams", json={"id": "shards", "name": "Other"})
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_team_id_must_be_slug(client):
    r = await client.post("/api/v1/teams", json={"id": "Not A Slug", "name": "X"})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_get_team(client, teams):
    r = await client.get("/api/v1/teams/shards")
    assert r.status_code == 200
    assert r.json()["name"] == "Shards"

    r = await client.get("/api/v1/teams/nobody")
    assert r.status_code == 404
