"""Rating service — sync CubeCobra ELO into the pool and the pick history.

Learn: One cube fetch feeds both tables. The ELO map is keyed by
lower-cased card name because that is the only identifier CubeCobra and
our rows reliably share. Rows whose name is not in the cube are counted
as "not found" and left untouched.

card_pools updates go through PoolService (the single card_pools write
path); team_draft_picks is written here directly.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dynasty_cube.cubecobra.client import CubeCobraClient, extract_elo_map
from dynasty_cube.db.models import TeamDraftPick, utcnow
from dynasty_cube.schemas.rating import RatingSyncResult, TableRatingResult
from dynasty_cube.services.pool_service import PoolService

logger = structlog.get_logger()


class RatingService:
    def __init__(
        self, db: AsyncSession, pool: PoolService, cubecobra: CubeCobraClient
    ):
        self.db = db
        self.pool = pool
        self.cubecobra = cubecobra

    async def sync_from_cube(self, cube_id: str) -> RatingSyncResult:
        logger.info("ratings.sync_started", cube_id=cube_id)

        cube_data = await self.cubecobra.fetch_cube_data(cube_id)
        if cube_data is None:
            return RatingSyncResult(
                success=False,
                message=f"Could not fetch cube {cube_id} from CubeCobra. Check server logs.",
            )

        elo_map = extract_elo_map(cube_data)
        if not elo_map:
            return RatingSyncResult(
                success=False,
                message=f"Cube {cube_id} returned no ELO ratings.",
            )

        pool_result = await self.pool.apply_elo_ratings(elo_map)
        picks_result = await self._update_pick_ratings(elo_map)

        total_updated = pool_result.updated_count + picks_result.updated_count
        total_not_found = pool_result.not_found_count + picks_result.not_found_count
        total_errors = len(pool_result.errors) + len(picks_result.errors)

        logger.info(
            "ratings.sync_finished",
            cube_id=cube_id,
            updated=total_updated,
            not_found=total_not_found,
            errors=total_errors,
        )
        return RatingSyncResult(
            success=pool_result.success and picks_result.success,
            message=(
                f"CubeCobra ELO Sync: {total_updated} updated, "
                f"{total_not_found} not found, {total_errors} errors"
            ),
            pool=pool_result,
            picks=picks_result,
        )

    async def _update_pick_ratings(self, elo_map: dict[str, int]) -> TableRatingResult:
        result = TableRatingResult(table=TeamDraftPick.__tablename__)
        picks = (await self.db.execute(select(TeamDraftPick))).scalars().all()

        now = utcnow()
        for pick in picks:
            elo = elo_map.get(pick.card_name.lower())
            if elo is None:
                result.not_found_count += 1
                continue
            pick.cubecobra_elo = elo
            pick.rating_updated_at = now
            result.updated_count += 1

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("ratings.pick_update_failed", error=str(e))
            result.success = False
            result.updated_count = 0
            result.errors.append(f"Bulk update failed: {e}")
        return result
