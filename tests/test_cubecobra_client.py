"""CubeCobra client tests — httpx.MockTransport, no network."""

import httpx
import pytest

from conftest import CUBECOBRA_BASE, cube_card, cube_json
from dynasty_cube.cubecobra import (
    CubeCobraClient,
    CubeCobraError,
    CubeNotFoundError,
    RateLimiter,
    extract_card_data_map,
    extract_elo_map,
)
from dynasty_cube.cubecobra.client import round_half_up
from dynasty_cube.cubecobra.schemas import CubeCobraResponse


def _client_for(handler) -> CubeCobraClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CubeCobraClient(http, base_url=CUBECOBRA_BASE, rate_limiter=RateLimiter(0))


# ─── Fetching ───────────────────────────────────────────


@pytest.mark.asyncio
async def test_fetch_cube_data_success(cubecobra, cube_responses, cubecobra_requests):
    cube_responses["dynasty"] = (200, cube_json([cube_card("Lightning Bolt", elo=1650)]))

    data = await cubecobra.fetch_cube_data("dynasty")

    assert data is not None
    assert data.name == "Dynasty Cube"
    assert len(data.mainboard) == 1
    request = cubecobra_requests[0]
    assert str(request.url) == f"{CUBECOBRA_BASE}/cubeJSON/dynasty"
    assert request.headers["Accept"] == "application/json"


@pytest.mark.asyncio
async def test_fetch_cube_data_not_found_returns_none(cubecobra):
    assert await cubecobra.fetch_cube_data("missing") is None


@pytest.mark.asyncio
async def test_fetch_cube_data_server_error_returns_none(cubecobra, cube_responses):
    cube_responses["dynasty"] = (500, {"error": "boom"})
    assert await cubecobra.fetch_cube_data("dynasty") is None


@pytest.mark.asyncio
async def test_request_cube_distinguishes_404_from_failure(cubecobra, cube_responses):
    cube_responses["broken"] = (503, {})

    with pytest.raises(CubeNotFoundError):
        await cubecobra.request_cube("missing")
    with pytest.raises(CubeCobraError) as exc_info:
        await cubecobra.request_cube("broken")
    assert not isinstance(exc_info.value, CubeNotFoundError)


@pytest.mark.asyncio
async def test_network_error_returns_none():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client_for(handler)
    assert await client.fetch_cube_data("dynasty") is None
    await client.http.aclose()


@pytest.mark.asyncio
async def test_malformed_json_returns_none():
    def handler(request):
        return httpx.Response(200, text="<html>maintenance</html>")

    client = _client_for(handler)
    assert await client.fetch_cube_data("dynasty") is None
    await client.http.aclose()


@pytest.mark.asyncio
async def test_cube_id_is_url_encoded(cubecobra, cubecobra_requests):
    await cubecobra.fetch_cube_data("my cube/1")
    assert cubecobra_requests[0].url.raw_path.endswith(b"/cubeJSON/my%20cube%2F1")


@pytest.mark.asyncio
async def test_every_fetch_waits_on_rate_limiter():
    waits = []

    class CountingLimiter(RateLimiter):
        async def wait(self):
            waits.append(1)

    http = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda r: httpx.Response(200, json=cube_json([])))
    )
    client = CubeCobraClient(http, base_url=CUBECOBRA_BASE, rate_limiter=CountingLimiter(0))
    await client.fetch_cube_data("dynasty")
    await client.get_card_elo("Lightning Bolt", "dynasty")
    assert len(waits) == 2
    await http.aclose()


# ─── get_card_elo ───────────────────────────────────────


@pytest.mark.asyncio
async def test_get_card_elo_is_case_insensitive(cubecobra, cube_responses):
    cube_responses["dynasty"] = (200, cube_json([cube_card("Lightning Bolt", elo=1650.4)]))

    result = await cubecobra.get_card_elo("LIGHTNING bolt", "dynasty")

    assert result is not None
    assert result.elo == 1650
    assert result.cube_name == "Dynasty Cube"


@pytest.mark.asyncio
async def test_get_card_elo_missing_card(cubecobra, cube_responses):
    cube_responses["dynasty"] = (200, cube_json([cube_card("Lightning Bolt", elo=1650)]))
    assert await cubecobra.get_card_elo("Counterspell", "dynasty") is None


@pytest.mark.asyncio
async def test_get_card_elo_missing_cube(cubecobra):
    assert await cubecobra.get_card_elo("Lightning Bolt", "missing") is None


# ─── Pure transforms ────────────────────────────────────


def test_round_half_up():
    assert round_half_up(1500.5) == 1501
    assert round_half_up(1500.4) == 1500
    assert round_half_up(1501.5) == 1502
    assert round_half_up(1500.0) == 1500


def test_extract_elo_map_lowercases_and_rounds():
    data = CubeCobraResponse.model_validate(cube_json([
        cube_card("Lightning Bolt", elo=1500.5),
        cube_card("Counterspell", elo=1432.2),
    ]))
    assert extract_elo_map(data) == {"lightning bolt": 1501, "counterspell": 1432}


def test_extract_elo_map_skips_cards_without_elo():
    data = CubeCobraResponse.model_validate(cube_json([
        cube_card("Lightning Bolt", elo=1600),
        cube_card("Brainstorm"),
    ]))
    assert extract_elo_map(data) == {"lightning bolt": 1600}


def test_extract_elo_map_falls_back_to_top_level_name():
    data = CubeCobraResponse.model_validate(cube_json([
        {"cardID": "x", "name": "Sol Ring", "details": {"elo": 1800}},
    ]))
    assert extract_elo_map(data) == {"sol ring": 1800}


def test_extract_maps_without_mainboard_are_empty():
    data = CubeCobraResponse.model_validate({"name": "Empty", "cards": {}})
    assert extract_elo_map(data) == {}
    assert extract_card_data_map(data) == {}


def test_extract_card_data_map_normalizes_fields():
    data = CubeCobraResponse.model_validate(cube_json([
        {
            "cardID": "top-level-id",
            "colors": ["R"],
            "cmc": 1,
            "details": {
                "name": "Lightning Bolt",
                "scryfall_id": "bolt-123",
                "set": "lea",
                "rarity": "common",
                "elo": 1650.5,
                "image_normal": "https://img.test/bolt.jpg",
            },
        },
    ]))

    card = extract_card_data_map(data)["lightning bolt"]

    assert card.name == "Lightning Bolt"
    assert card.card_id == "bolt-123"
    assert card.set == "lea"
    assert card.set_name == "lea"
    assert card.rarity == "common"
    assert card.colors == ["R"]
    assert card.cmc == 1
    assert card.elo == 1651
    assert card.image_normal == "https://img.test/bolt.jpg"


def test_extract_card_data_map_keeps_cards_without_elo():
    data = CubeCobraResponse.model_validate(cube_json([
        {"cardID": "bs-1", "details": {"name": "Brainstorm", "colors": ["U"], "cmc": 1}},
    ]))

    card = extract_card_data_map(data)["brainstorm"]

    assert card.elo == 0
    assert card.card_id == "bs-1"
    assert card.rarity == "unknown"
    assert card.colors == ["U"]


def test_extract_card_data_map_skips_entries_without_details_name():
    data = CubeCobraResponse.model_validate(cube_json([
        {"cardID": "x", "name": "No Details"},
        {"cardID": "y", "details": {"elo": 1500}},
    ]))
    assert extract_card_data_map(data) == {}
