"""Pydantic schemas for draft sessions, picks, and queues."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

SESSION_STATUSES = r"^(scheduled|active|paused|completed)$"


# ─── Sessions ───────────────────────────────────────────

class DraftSessionCreate(BaseModel):
    status: str = Field(default="scheduled", pattern=SESSION_STATUSES)
    total_rounds: int = Field(default=45, ge=1, le=500)


class DraftSessionStatusUpdate(BaseModel):
    status: str = Field(..., pattern=SESSION_STATUSES)


class DraftSessionRead(BaseModel):
    id: uuid.UUID
    status: str
    total_rounds: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ─── Picks ──────────────────────────────────────────────

class PickCreate(BaseModel):
    team_id: str = Field(..., min_length=1)
    card_pool_id: uuid.UUID


class PickRead(BaseModel):
    id: uuid.UUID
    session_id: Optional[uuid.UUID]
    team_id: str
    card_pool_id: uuid.UUID
    card_id: str
    card_name: str
    card_set: Optional[str]
    rarity: Optional[str]
    colors: list[str]
    image_url: Optional[str]
    cmc: Optional[float]
    pick_number: int
    cubecobra_elo: Optional[int]
    drafted_at: datetime

    model_config = {"from_attributes": True}


class DraftPickEvent(BaseModel):
    """Payload of a `new_pick` broadcast. Consumers dedupe on `id`."""

    model_config = ConfigDict(frozen=True)

    id: str
    pick_number: int
    card_name: str
    card_set: Optional[str] = None
    rarity: Optional[str] = None
    image_url: Optional[str] = None
    team_name: str
    team_id: str


# ─── Queue ──────────────────────────────────────────────

class QueueEntryCreate(BaseModel):
    card_pool_id: uuid.UUID
    pinned: bool = False


class QueueEntryRead(BaseModel):
    id: uuid.UUID
    team_id: str
    card_pool_id: uuid.UUID
    card_id: str
    card_name: str
    position: int
    pinned: bool
    created_at: datetime

    model_config = {"from_attributes": True}
