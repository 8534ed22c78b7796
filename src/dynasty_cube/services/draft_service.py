"""Draft service — sessions, picks, queues, and live pick broadcasts.

Learn: A pick touches three things, in this order:
1. team_draft_picks — the pick row itself (committed first; it is the
   source of truth)
2. team_draft_queue — every team's queue loses the card if no copy of it
   is left to draft
3. the session's broadcast channel — one `new_pick` event for the live
   draft boards

Steps 2 and 3 are follow-ups: if they fail the pick still stands, and
the failure is logged rather than raised. A failed cleanup never skips
the broadcast.

Queue cleanup uses the duplicate card id cache. A card that appears once
in the pool is gone as soon as it is drafted, so its queue rows can be
deleted without counting anything. Only duplicated cards need the
"is another copy still available?" query.
"""

import uuid
from typing import Any, Awaitable, Callable, Optional

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dynasty_cube.db.models import (
    DraftQueueEntry,
    DraftSession,
    Team,
    TeamDraftPick,
)
from dynasty_cube.realtime.pubsub import NEW_PICK
from dynasty_cube.schemas.draft import DraftPickEvent
from dynasty_cube.services.pool_service import PoolService
from dynasty_cube.services.team_service import TeamNotFoundError

logger = structlog.get_logger()

# (session_id, event, payload) -> receiver count
Broadcaster = Callable[[str, str, dict[str, Any]], Awaitable[Any]]


class DraftSessionNotFoundError(Exception):
    pass


class DraftSessionNotActiveError(Exception):
    pass


class CardAlreadyDraftedError(Exception):
    pass


class DuplicateTeamCardError(Exception):
    pass


class QueueEntryExistsError(Exception):
    pass


class DraftService:
    """Business logic for the live draft."""

    def __init__(
        self,
        db: AsyncSession,
        pool: PoolService,
        broadcaster: Optional[Broadcaster] = None,
    ):
        self.db = db
        self.pool = pool
        self.broadcaster = broadcaster

    # ─── Sessions ───────────────────────────────────────

    async def create_session(
        self, status: str = "scheduled", total_rounds: int = 45
    ) -> DraftSession:
        session = DraftSession(status=status, total_rounds=total_rounds)
        self.db.add(session)
        await self.db.commit()
        logger.info("draft.session_created", session_id=str(session.id), status=status)
        return session

    async def get_session(self, session_id: uuid.UUID) -> DraftSession | None:
        return await self.db.get(DraftSession, session_id)

    async def require_session(self, session_id: uuid.UUID) -> DraftSession:
        session = await self.get_session(session_id)
        if session is None:
            raise DraftSessionNotFoundError(f"Draft session {session_id} not found")
        return session

    async def set_session_status(
        self, session_id: uuid.UUID, status: str
    ) -> DraftSession:
        session = await self.require_session(session_id)
        old_status = session.status
        session.status = status
        await self.db.commit()
        logger.info(
            "draft.session_status_changed",
            session_id=str(session_id),
            old_status=old_status,
            new_status=status,
        )
        return session

    # ─── Picks ──────────────────────────────────────────

    async def make_pick(
        self, session_id: uuid.UUID, team_id: str, card_pool_id: uuid.UUID
    ) -> TeamDraftPick:
        """Draft one pool card for a team, then clean queues and broadcast."""
        session = await self.require_session(session_id)
        if session.status != "active":
            raise DraftSessionNotActiveError(
                f"Draft session {session_id} is {session.status}, not active"
            )

        team = await self.db.get(Team, team_id)
        if team is None:
            raise TeamNotFoundError(f"Team {team_id} not found")

        card = await self.pool.require_card(card_pool_id)
        if await self.pool.is_drafted(card_pool_id):
            raise CardAlreadyDraftedError(f"{card.card_name} has already been drafted")

        owned = await self.db.execute(
            select(func.count())
            .select_from(TeamDraftPick)
            .where(TeamDraftPick.team_id == team_id, TeamDraftPick.card_id == card.card_id)
        )
        if owned.scalar_one() > 0:
            raise DuplicateTeamCardError(f"{team.name} already owns {card.card_name}")

        pick_count = await self.db.execute(
            select(func.count())
            .select_from(TeamDraftPick)
            .where(TeamDraftPick.team_id == team_id)
        )

        pick = TeamDraftPick(
            session_id=session.id,
            team_id=team_id,
            card_pool_id=card.id,
            card_id=card.card_id,
            card_name=card.card_name,
            card_set=card.card_set,
            card_type=card.card_type,
            rarity=card.rarity,
            colors=list(card.colors or []),
            image_url=card.image_url,
            mana_cost=card.mana_cost,
            cmc=card.cmc,
            pick_number=pick_count.scalar_one() + 1,
            cubecobra_elo=card.cubecobra_elo,
            rating_updated_at=card.rating_updated_at,
        )
        self.db.add(pick)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent pick of the same instance or card.
            # Build the message first: rollback expires every loaded row.
            message = f"{card.card_name} has already been drafted"
            await self.db.rollback()
            raise CardAlreadyDraftedError(message)
        logger.info(
            "draft.pick_made",
            session_id=str(session_id),
            team_id=team_id,
            card_name=card.card_name,
            pick_number=pick.pick_number,
        )

        # Captured now: a rollback below expires every loaded row.
        event = DraftPickEvent(
            id=str(pick.id),
            pick_number=pick.pick_number,
            card_name=pick.card_name,
            card_set=pick.card_set,
            rarity=pick.rarity,
            image_url=pick.image_url,
            team_name=team.name,
            team_id=team.id,
        )
        drafted_card_id = card.card_id

        try:
            await self.cleanup_draft_queues(drafted_card_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "draft.queue_cleanup_failed",
                session_id=str(session_id),
                card_id=drafted_card_id,
                error=str(e),
            )
            await self.db.refresh(pick)

        await self._broadcast_pick(session_id, event)
        return pick

    async def _broadcast_pick(
        self, session_id: uuid.UUID, event: DraftPickEvent
    ) -> None:
        if self.broadcaster is None:
            return
        try:
            await self.broadcaster(str(session_id), NEW_PICK, event.model_dump())
        except Exception as e:
            # The pick is already committed
            logger.warning(
                "draft.broadcast_failed", session_id=str(session_id), error=str(e)
            )

    async def list_team_picks(self, team_id: str) -> list[TeamDraftPick]:
        result = await self.db.execute(
            select(TeamDraftPick)
            .where(TeamDraftPick.team_id == team_id)
            .order_by(TeamDraftPick.pick_number)
        )
        return list(result.scalars().all())

    async def list_session_picks(self, session_id: uuid.UUID) -> list[TeamDraftPick]:
        result = await self.db.execute(
            select(TeamDraftPick)
            .where(TeamDraftPick.session_id == session_id)
            .order_by(TeamDraftPick.drafted_at, TeamDraftPick.pick_number)
        )
        return list(result.scalars().all())

    # ─── Queues ─────────────────────────────────────────

    async def add_to_queue(
        self, team_id: str, card_pool_id: uuid.UUID, pinned: bool = False
    ) -> DraftQueueEntry:
        if await self.db.get(Team, team_id) is None:
            raise TeamNotFoundError(f"Team {team_id} not found")
        card = await self.pool.require_card(card_pool_id)

        queued = await self.db.execute(
            select(func.count())
            .select_from(DraftQueueEntry)
            .where(
                DraftQueueEntry.team_id == team_id,
                DraftQueueEntry.card_pool_id == card.id,
            )
        )
        if queued.scalar_one() > 0:
            raise QueueEntryExistsError(f"{card.card_name} is already in the queue")

        last = await self.db.execute(
            select(func.max(DraftQueueEntry.position)).where(
                DraftQueueEntry.team_id == team_id
            )
        )
        entry = DraftQueueEntry(
            team_id=team_id,
            card_pool_id=card.id,
            card_id=card.card_id,
            card_name=card.card_name,
            position=(last.scalar_one_or_none() or 0) + 1,
            pinned=pinned,
        )
        self.db.add(entry)
        await self.db.commit()
        return entry

    async def list_queue(self, team_id: str) -> list[DraftQueueEntry]:
        result = await self.db.execute(
            select(DraftQueueEntry)
            .where(DraftQueueEntry.team_id == team_id)
            .order_by(DraftQueueEntry.position)
        )
        return list(result.scalars().all())

    async def cleanup_draft_queues(self, drafted_card_id: str) -> bool:
        """Remove a drafted card from every queue once no copy is left.

        Returns True when queue rows were deleted.
        """
        duplicates = await self.pool.duplicate_card_ids()

        if drafted_card_id in duplicates:
            remaining = await self.pool.count_available_copies(drafted_card_id)
            if remaining > 0:
                logger.info(
                    "draft.queue_cleanup_skipped",
                    card_id=drafted_card_id,
                    remaining_copies=remaining,
                )
                return False
            logger.info("draft.last_copy_drafted", card_id=drafted_card_id)

        await self.db.execute(
            delete(DraftQueueEntry).where(DraftQueueEntry.card_id == drafted_card_id)
        )
        await self.db.commit()
        logger.info("draft.queues_cleaned", card_id=drafted_card_id)
        return True
