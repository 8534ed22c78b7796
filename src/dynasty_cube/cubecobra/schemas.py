"""Pydantic models for the CubeCobra cubeJSON response.

Learn: The cubeJSON endpoint is not an official public API, so every
field is optional and unknown fields are ignored. We validate just
enough structure to walk cards.mainboard safely.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CubeCobraCardDetails(BaseModel):
    """The nested `details` record — the richer source of card data."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    elo: Optional[float] = None
    name: Optional[str] = None
    scryfall_id: Optional[str] = None
    set: Optional[str] = None
    set_name: Optional[str] = None
    rarity: Optional[str] = None
    oracle_text: Optional[str] = None
    cmc: Optional[float] = None
    colors: Optional[list[str]] = None
    color_identity: Optional[list[str]] = None
    power: Optional[str] = None
    toughness: Optional[str] = None
    popularity: Optional[float] = None
    cube_count: Optional[int] = Field(default=None, alias="cubeCount")
    pick_count: Optional[int] = Field(default=None, alias="pickCount")
    image_small: Optional[str] = None
    image_normal: Optional[str] = None


class CubeCobraCard(BaseModel):
    """A mainboard entry. Top-level fields are the cube owner's overrides."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    card_id: Optional[str] = Field(default=None, alias="cardID")
    name: Optional[str] = None
    cmc: Optional[float] = None
    colors: Optional[list[str]] = None
    status: Optional[str] = None
    tags: Optional[list[str]] = None
    details: Optional[CubeCobraCardDetails] = None


class CubeCobraBoards(BaseModel):
    model_config = ConfigDict(extra="ignore")

    mainboard: Optional[list[CubeCobraCard]] = None
    maybeboard: Optional[list[CubeCobraCard]] = None


class CubeCobraImage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    uri: Optional[str] = None


class CubeCobraResponse(BaseModel):
    """Top level of GET /cube/api/cubeJSON/{cubeId}."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    cards: Optional[CubeCobraBoards] = None
    name: str = ""
    short_id: Optional[str] = Field(default=None, alias="shortId")
    card_count: Optional[int] = Field(default=None, alias="cardCount")
    description: Optional[str] = None
    image: Optional[CubeCobraImage] = None

    @property
    def mainboard(self) -> list[CubeCobraCard]:
        if self.cards is None or self.cards.mainboard is None:
            return []
        return self.cards.mainboard


class CubeCobraExtractedCard(BaseModel):
    """Normalized card data used by the pool import."""

    name: str
    card_id: str = ""
    set: str = ""
    set_name: str = ""
    rarity: str = "unknown"
    colors: list[str] = Field(default_factory=list)
    cmc: float = 0
    elo: int = 0
    image_normal: Optional[str] = None


class CardElo(BaseModel):
    elo: int
    cube_name: str
