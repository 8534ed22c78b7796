"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic migrations are generated from these models.

Key concepts:
- Portable column types (Uuid, JSON) so the same models run on
  PostgreSQL in production and SQLite in the test suite
- Python-side defaults for timestamps, so freshly inserted rows are
  fully loaded without an extra round trip
- card_pools holds one row per physical card instance; the same
  card_id appears more than once when the cube runs duplicates
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


# ══════════════════════════════════════════════════════════════
# Teams
# ══════════════════════════════════════════════════════════════


class Team(Base):
    """A league team. Ids are short slugs ("shards", "ninja")."""

    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    emoji: Mapped[str] = mapped_column(String(16), nullable=False, default="")
    motto: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


# ══════════════════════════════════════════════════════════════
# Card pool
# ══════════════════════════════════════════════════════════════


class CardPool(Base):
    """One draftable card instance.

    Learn: card_id is the Scryfall id and is NOT unique — a cube can
    hold several copies of the same card. The set of card_ids that
    appear more than once is what DraftCache memoizes.
    """

    __tablename__ = "card_pools"
    __table_args__ = (
        Index("ix_card_pools_card_id", "card_id"),
        Index("ix_card_pools_pool_name", "pool_name"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    card_id: Mapped[str] = mapped_column(String(64), nullable=False)
    card_name: Mapped[str] = mapped_column(String(200), nullable=False)
    card_set: Mapped[Optional[str]] = mapped_column(String(20))
    card_type: Mapped[Optional[str]] = mapped_column(String(200))
    rarity: Mapped[Optional[str]] = mapped_column(String(20))
    colors: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    mana_cost: Mapped[Optional[str]] = mapped_column(String(100))
    cmc: Mapped[Optional[float]] = mapped_column(Float)
    cubucks_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pool_name: Mapped[str] = mapped_column(
        String(100), nullable=False, default="default"
    )
    cubecobra_elo: Mapped[Optional[int]] = mapped_column(Integer)
    rating_updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True)
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


# ══════════════════════════════════════════════════════════════
# Draft sessions, picks, queues
# ══════════════════════════════════════════════════════════════


class DraftSession(Base):
    """A draft run. Picks are only accepted while the session is active."""

    __tablename__ = "draft_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="scheduled"
    )  # scheduled, active, paused, completed
    total_rounds: Mapped[int] = mapped_column(Integer, nullable=False, default=45)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class TeamDraftPick(Base):
    """A card drafted by a team.

    Learn: card fields are copied from the pool row at pick time so the
    pick history survives later pool edits. card_pool_id is unique —
    each physical instance can be drafted once — while (team_id, card_id)
    keeps a team from owning two copies of the same card.
    """

    __tablename__ = "team_draft_picks"
    __table_args__ = (
        UniqueConstraint("team_id", "card_id", name="uq_team_draft_picks_team_card"),
        UniqueConstraint("card_pool_id", name="uq_team_draft_picks_card_pool"),
        Index("ix_team_draft_picks_team_id", "team_id"),
        Index("ix_team_draft_picks_session_id", "session_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    session_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("draft_sessions.id", ondelete="SET NULL")
    )
    team_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    card_pool_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("card_pools.id", ondelete="CASCADE"), nullable=False
    )
    card_id: Mapped[str] = mapped_column(String(64), nullable=False)
    card_name: Mapped[str] = mapped_column(String(200), nullable=False)
    card_set: Mapped[Optional[str]] = mapped_column(String(20))
    card_type: Mapped[Optional[str]] = mapped_column(String(200))
    rarity: Mapped[Optional[str]] = mapped_column(String(20))
    colors: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    mana_cost: Mapped[Optional[str]] = mapped_column(String(100))
    cmc: Mapped[Optional[float]] = mapped_column(Float)
    pick_number: Mapped[int] = mapped_column(Integer, nullable=False)
    cubecobra_elo: Mapped[Optional[int]] = mapped_column(Integer)
    rating_updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True)
    )
    drafted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


class DraftQueueEntry(Base):
    """A card a team wants next, in priority order."""

    __tablename__ = "team_draft_queue"
    __table_args__ = (
        UniqueConstraint("team_id", "card_pool_id", name="uq_team_draft_queue_card"),
        Index("ix_team_draft_queue_card_id", "card_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    team_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    card_pool_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("card_pools.id", ondelete="CASCADE"), nullable=False
    )
    card_id: Mapped[str] = mapped_column(String(64), nullable=False)
    card_name: Mapped[str] = mapped_column(String(200), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
