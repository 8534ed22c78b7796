"""Process-wide cache of card ids that appear more than once in the pool.

Learn: Queue cleanup after every pick needs to know whether the drafted
card is unique in the pool. Counting card_pools on every pick is a full
table scan, so the answer is computed once per process and kept until
the pool changes.

Staleness is not detected automatically. The contract is structural
instead: PoolService is the only writer of card_pools and invalidates
this cache on every write (see PoolService._write).

Two layers:
1. DraftCache — survives across requests, lost on restart.
2. RequestMemo — optional, dedupes concurrent population within one
   request. Nothing stops two *different* requests from populating at
   the same time; both compute the same answer.
"""

from collections import Counter
from typing import Awaitable, Callable, Iterable, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dynasty_cube.cache.request_memo import RequestMemo
from dynasty_cube.db.models import CardPool

logger = structlog.get_logger()

DUPLICATE_CARD_IDS_KEY = "draft_cache.duplicate_card_ids"

Loader = Callable[[AsyncSession], Awaitable[Iterable[Optional[str]]]]


async def load_pool_card_ids(db: AsyncSession) -> list[Optional[str]]:
    """Every card_id in card_pools, one entry per row."""
    result = await db.execute(select(CardPool.card_id))
    return list(result.scalars().all())


class DraftCache:
    """Holds the duplicate card id set between pool writes."""

    def __init__(self, loader: Loader = load_pool_card_ids):
        self._loader = loader
        self._duplicate_card_ids: Optional[frozenset[str]] = None

    @property
    def is_populated(self) -> bool:
        return self._duplicate_card_ids is not None

    async def get_duplicate_card_ids(
        self, db: AsyncSession, memo: Optional[RequestMemo] = None
    ) -> frozenset[str]:
        if memo is None:
            return await self._populate(db)
        return await memo.get_or_create(
            DUPLICATE_CARD_IDS_KEY, lambda: self._populate(db)
        )

    async def _populate(self, db: AsyncSession) -> frozenset[str]:
        if self._duplicate_card_ids is not None:
            logger.debug("draft_cache.hit", size=len(self._duplicate_card_ids))
            return self._duplicate_card_ids

        logger.info("draft_cache.miss")
        try:
            card_ids = await self._loader(db)
        except SQLAlchemyError as e:
            # Not stored: the next call tries the query again
            logger.error("draft_cache.query_failed", error=str(e))
            return frozenset()

        counts = Counter(card_id for card_id in card_ids if card_id)
        duplicates = frozenset(card_id for card_id, n in counts.items() if n > 1)

        self._duplicate_card_ids = duplicates
        logger.info("draft_cache.populated", duplicates=len(duplicates))
        return duplicates

    def invalidate(self, memo: Optional[RequestMemo] = None) -> None:
        """Drop the cached set. Called by the card pool write path."""
        self._duplicate_card_ids = None
        if memo is not None:
            memo.forget(DUPLICATE_CARD_IDS_KEY)
        logger.info("draft_cache.invalidated")
