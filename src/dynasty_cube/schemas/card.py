"""Pydantic schemas for the card pool.

Learn: Separate "Create" schemas (input) from "Read" schemas (output).
PoolCardRead adds the derived draft status, which is not a column.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PoolCardCreate(BaseModel):
    card_id: str = Field(..., min_length=1, max_length=64)
    card_name: str = Field(..., min_length=1, max_length=200)
    card_set: Optional[str] = None
    card_type: Optional[str] = None
    rarity: Optional[str] = None
    colors: list[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    mana_cost: Optional[str] = None
    cmc: Optional[float] = None
    cubucks_cost: int = Field(default=0, ge=0)
    pool_name: str = Field(default="default", min_length=1, max_length=100)


class PoolCardsCreate(BaseModel):
    cards: list[PoolCardCreate] = Field(..., min_length=1)


class PoolCardRead(BaseModel):
    id: uuid.UUID
    card_id: str
    card_name: str
    card_set: Optional[str]
    card_type: Optional[str]
    rarity: Optional[str]
    colors: list[str]
    image_url: Optional[str]
    mana_cost: Optional[str]
    cmc: Optional[float]
    cubucks_cost: int
    pool_name: str
    cubecobra_elo: Optional[int]
    rating_updated_at: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class PoolCardStatus(PoolCardRead):
    """Pool card with its draft status."""
    is_drafted: bool = False
    drafted_by_team_id: Optional[str] = None


class DuplicateCardIds(BaseModel):
    card_ids: list[str]
    count: int


class CubeImportRequest(BaseModel):
    cube_id: str = Field(..., min_length=1)
    pool_name: str = Field(default="default", min_length=1, max_length=100)


class CubeImportResult(BaseModel):
    cube_name: str
    imported: int
    skipped: int
