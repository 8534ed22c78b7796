"""Pydantic schemas for league teams."""

from datetime import datetime

from pydantic import BaseModel, Field


class TeamCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z0-9-]+$")
    name: str = Field(..., min_length=1, max_length=100)
    emoji: str = Field(default="", max_length=16)
    motto: str = Field(default="")


class TeamRead(BaseModel):
    id: str
    name: str
    emoji: str
    motto: str
    created_at: datetime

    model_config = {"from_attributes": True}
