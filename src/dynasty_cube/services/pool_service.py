"""Card pool service — the single write path for card_pools.

Learn: DraftCache memoizes which card ids are duplicated in the pool and
has no way to notice when the pool changes. Instead of asking every
caller to remember to invalidate it, all card_pools writes go through
PoolService._write(), which commits and then invalidates. A forgotten
invalidation is impossible as long as nothing else writes the table.
Rating updates are the one opt-out: they never touch card_id.

Reads (availability, draft status) live here too, so "what's in the
pool" has one owner.
"""

import uuid
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from sqlalchemy import exists, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dynasty_cube.cache.draft_cache import DraftCache
from dynasty_cube.cache.request_memo import RequestMemo
from dynasty_cube.cubecobra.schemas import CubeCobraExtractedCard
from dynasty_cube.db.models import CardPool, TeamDraftPick, utcnow
from dynasty_cube.schemas.card import PoolCardCreate
from dynasty_cube.schemas.rating import TableRatingResult

logger = structlog.get_logger()


class CardNotFoundError(Exception):
    pass


def _is_drafted():
    return exists().where(TeamDraftPick.card_pool_id == CardPool.id)


class PoolService:
    """Business logic for the draftable card pool."""

    def __init__(
        self,
        db: AsyncSession,
        cache: DraftCache,
        memo: Optional[RequestMemo] = None,
    ):
        self.db = db
        self.cache = cache
        self.memo = memo

    @asynccontextmanager
    async def _write(self, invalidate: bool = True):
        """Wrap every card_pools mutation: commit, then invalidate the cache.

        Pass invalidate=False only for writes that leave card_id untouched.
        """
        try:
            yield
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        finally:
            if invalidate:
                self.cache.invalidate(self.memo)

    # ─── Writes ─────────────────────────────────────────

    async def add_cards(self, cards: list[PoolCardCreate]) -> list[CardPool]:
        rows = [CardPool(**card.model_dump()) for card in cards]
        async with self._write():
            self.db.add_all(rows)
        logger.info("pool.cards_added", count=len(rows))
        return rows

    async def remove_card(self, card_pool_id: uuid.UUID) -> None:
        card = await self.require_card(card_pool_id)
        async with self._write():
            await self.db.delete(card)
        logger.info("pool.card_removed", card_pool_id=str(card_pool_id))

    async def import_cube_cards(
        self,
        card_map: dict[str, CubeCobraExtractedCard],
        pool_name: str = "default",
    ) -> tuple[int, int]:
        """Add one pool row per extracted card. Returns (imported, skipped).

        Cards without a Scryfall id cannot be matched to anything else in
        the league, so they are skipped.
        """
        now = utcnow()
        rows = []
        skipped = 0
        for card in card_map.values():
            if not card.card_id:
                skipped += 1
                continue
            rows.append(
                CardPool(
                    card_id=card.card_id,
                    card_name=card.name,
                    card_set=card.set or None,
                    rarity=card.rarity,
                    colors=card.colors,
                    image_url=card.image_normal,
                    cmc=card.cmc,
                    pool_name=pool_name,
                    cubecobra_elo=card.elo or None,
                    rating_updated_at=now if card.elo else None,
                )
            )

        if rows:
            async with self._write():
                self.db.add_all(rows)
        logger.info("pool.cube_imported", imported=len(rows), skipped=skipped)
        return len(rows), skipped

    async def apply_elo_ratings(self, elo_map: dict[str, int]) -> TableRatingResult:
        """Set cubecobra_elo on every pool row whose name is in the map.

        Ratings never change card_id, so the duplicate cache survives.
        """
        result = TableRatingResult(table=CardPool.__tablename__)
        rows = (await self.db.execute(select(CardPool))).scalars().all()
        if not rows:
            return result

        now = utcnow()
        try:
            async with self._write(invalidate=False):
                for row in rows:
                    elo = elo_map.get(row.card_name.lower())
                    if elo is None:
                        result.not_found_count += 1
                        continue
                    row.cubecobra_elo = elo
                    row.rating_updated_at = now
                    result.updated_count += 1
        except SQLAlchemyError as e:
            logger.error("pool.rating_update_failed", error=str(e))
            result.success = False
            result.updated_count = 0
            result.errors.append(f"Bulk update failed: {e}")
        return result

    # ─── Reads ──────────────────────────────────────────

    async def get_card(self, card_pool_id: uuid.UUID) -> CardPool | None:
        return await self.db.get(CardPool, card_pool_id)

    async def require_card(self, card_pool_id: uuid.UUID) -> CardPool:
        card = await self.get_card(card_pool_id)
        if card is None:
            raise CardNotFoundError(f"Pool card {card_pool_id} not found")
        return card

    async def list_cards(
        self, pool_name: Optional[str] = None
    ) -> list[tuple[CardPool, Optional[str]]]:
        """Pool rows with the id of the team that drafted each (or None)."""
        q = (
            select(CardPool, TeamDraftPick.team_id)
            .outerjoin(TeamDraftPick, TeamDraftPick.card_pool_id == CardPool.id)
            .order_by(CardPool.card_name)
        )
        if pool_name:
            q = q.where(CardPool.pool_name == pool_name)
        result = await self.db.execute(q)
        return [(row[0], row[1]) for row in result.all()]

    async def list_available(self, pool_name: Optional[str] = None) -> list[CardPool]:
        q = select(CardPool).where(~_is_drafted()).order_by(CardPool.card_name)
        if pool_name:
            q = q.where(CardPool.pool_name == pool_name)
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def is_drafted(self, card_pool_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            select(func.count())
            .select_from(TeamDraftPick)
            .where(TeamDraftPick.card_pool_id == card_pool_id)
        )
        return result.scalar_one() > 0

    async def count_available_copies(self, card_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(CardPool)
            .where(CardPool.card_id == card_id, ~_is_drafted())
        )
        return result.scalar_one()

    async def duplicate_card_ids(self) -> frozenset[str]:
        return await self.cache.get_duplicate_card_ids(self.db, self.memo)
