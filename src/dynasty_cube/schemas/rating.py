"""Pydantic schemas for the CubeCobra ELO sync."""

from typing import Optional

from pydantic import BaseModel, Field


class RatingSyncRequest(BaseModel):
    cube_id: Optional[str] = Field(default=None, min_length=1)


class TableRatingResult(BaseModel):
    table: str
    success: bool = True
    updated_count: int = 0
    not_found_count: int = 0
    errors: list[str] = Field(default_factory=list)

    @property
    def message(self) -> str:
        return (
            f"Updated {self.updated_count} cards in {self.table}. "
            f"Not found: {self.not_found_count}. Errors: {len(self.errors)}"
        )


class RatingSyncResult(BaseModel):
    success: bool
    message: str
    pool: Optional[TableRatingResult] = None
    picks: Optional[TableRatingResult] = None


class CardEloRead(BaseModel):
    card_name: str
    cube_id: str
    cube_name: str
    elo: int
