"""CubeCobra API client — cube contents and per-card ELO ratings.

Learn: https://cubecobra.com/cube/api/cubeJSON/{cubeId} returns an entire
cube (~670 cards) in one response, including each card's ELO. The API
isn't officially public, so every request goes through the RateLimiter.

Two layers:
1. request_cube() raises — CubeNotFoundError on 404, CubeCobraError on
   anything else. Use it when the caller must tell the two apart.
2. fetch_cube_data() never raises for upstream trouble — it logs and
   returns None. This is what the rating sync uses.

No retries anywhere: a failure is reported once and the caller decides.
"""

import math
from typing import Optional
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError

from dynasty_cube.config import settings
from dynasty_cube.cubecobra.rate_limit import RateLimiter
from dynasty_cube.cubecobra.schemas import (
    CardElo,
    CubeCobraExtractedCard,
    CubeCobraResponse,
)

logger = structlog.get_logger()


class CubeCobraError(Exception):
    """CubeCobra could not be reached or answered with an error."""


class CubeNotFoundError(CubeCobraError):
    """CubeCobra answered 404 for the cube id."""


def round_half_up(value: float) -> int:
    """Round .5 toward +infinity (Python's round() is banker's rounding)."""
    return math.floor(value + 0.5)


class CubeCobraClient:
    """Rate-limited async client for the cubeJSON endpoint."""

    def __init__(
        self,
        http: Optional[httpx.AsyncClient] = None,
        *,
        base_url: str = settings.cubecobra_api_base,
        rate_limiter: Optional[RateLimiter] = None,
        timeout: float = settings.cubecobra_timeout_seconds,
    ):
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = rate_limiter or RateLimiter(
            settings.cubecobra_request_delay_seconds
        )
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    def cube_url(self, cube_id: str) -> str:
        return f"{self.base_url}/cubeJSON/{quote(cube_id, safe='')}"

    async def request_cube(self, cube_id: str) -> CubeCobraResponse:
        """Fetch and validate one cube. Raises on any failure."""
        await self.rate_limiter.wait()

        url = self.cube_url(cube_id)
        logger.info("cubecobra.fetching", cube_id=cube_id, url=url)
        try:
            response = await self.http.get(
                url, headers={"Accept": "application/json"}
            )
        except httpx.HTTPError as e:
            raise CubeCobraError(f"CubeCobra request failed: {e}") from e

        if response.status_code == 404:
            raise CubeNotFoundError(f"Cube not found on CubeCobra: {cube_id}")
        if not response.is_success:
            raise CubeCobraError(
                f"CubeCobra API error: {response.status_code} {response.reason_phrase}"
            )

        try:
            data = CubeCobraResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise CubeCobraError(f"Malformed CubeCobra response: {e}") from e

        logger.info(
            "cubecobra.fetched",
            cube_id=cube_id,
            cube_name=data.name,
            mainboard=len(data.mainboard),
        )
        return data

    async def fetch_cube_data(self, cube_id: str) -> Optional[CubeCobraResponse]:
        """Fetch a cube, or None when it is missing or CubeCobra fails."""
        try:
            return await self.request_cube(cube_id)
        except CubeNotFoundError:
            logger.warning("cubecobra.cube_not_found", cube_id=cube_id)
            return None
        except CubeCobraError as e:
            logger.error("cubecobra.fetch_failed", cube_id=cube_id, error=str(e))
            return None

    async def get_card_elo(self, card_name: str, cube_id: str) -> Optional[CardElo]:
        """ELO for one card in one cube, or None if the cube or card is missing."""
        cube_data = await self.fetch_cube_data(cube_id)
        if cube_data is None:
            return None

        elo = extract_elo_map(cube_data).get(card_name.lower())
        if elo is None:
            return None
        return CardElo(elo=elo, cube_name=cube_data.name)


# ─── Pure transforms ──────────────────────────────────────


def _has_mainboard(cube_data: CubeCobraResponse) -> bool:
    if cube_data.cards is None or cube_data.cards.mainboard is None:
        logger.warning("cubecobra.no_mainboard", cube_name=cube_data.name)
        return False
    return True


def extract_elo_map(cube_data: CubeCobraResponse) -> dict[str, int]:
    """Map lower-cased card name → integer ELO.

    Cards without an ELO are left out entirely. Compare
    extract_card_data_map(), which keeps them with elo=0 — callers
    depend on the difference.
    """
    elo_map: dict[str, int] = {}
    if not _has_mainboard(cube_data):
        return elo_map

    for card in cube_data.mainboard:
        details = card.details
        # details.name is the canonical name; the top-level one is a fallback
        card_name = (details.name if details else None) or card.name
        elo = details.elo if details else None
        if card_name and elo is not None:
            elo_map[card_name.lower()] = round_half_up(elo)

    logger.info("cubecobra.elo_map_built", cards=len(elo_map))
    return elo_map


def extract_card_data_map(
    cube_data: CubeCobraResponse,
) -> dict[str, CubeCobraExtractedCard]:
    """Map lower-cased card name → normalized card data for the pool import.

    Nested `details` fields win over the top-level ones. Missing ELO
    becomes 0 here (not omitted, unlike extract_elo_map).
    """
    card_map: dict[str, CubeCobraExtractedCard] = {}
    if not _has_mainboard(cube_data):
        return card_map

    for card in cube_data.mainboard:
        details = card.details
        if details is None or not details.name:
            continue

        if details.colors is not None:
            colors = details.colors
        elif card.colors is not None:
            colors = card.colors
        else:
            colors = []

        if details.cmc is not None:
            cmc = details.cmc
        elif card.cmc is not None:
            cmc = card.cmc
        else:
            cmc = 0

        card_map[details.name.lower()] = CubeCobraExtractedCard(
            name=details.name,
            card_id=details.scryfall_id or card.card_id or "",
            set=details.set or "",
            set_name=details.set_name or details.set or "",
            rarity=details.rarity or "unknown",
            colors=colors,
            cmc=cmc,
            elo=round_half_up(details.elo) if details.elo is not None else 0,
            image_normal=details.image_normal,
        )

    logger.info("cubecobra.card_data_map_built", cards=len(card_map))
    return card_map
