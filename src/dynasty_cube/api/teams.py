"""League team API routes.

Learn: Routes handle HTTP concerns (status codes, error responses);
services raise plain domain exceptions and never import FastAPI.
Each route translates the exceptions it expects into an HTTPException.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from dynasty_cube.api.dependencies import get_draft_service
from dynasty_cube.db.engine import get_db
from dynasty_cube.schemas.draft import PickRead, QueueEntryCreate, QueueEntryRead
from dynasty_cube.schemas.team import TeamCreate, TeamRead
from dynasty_cube.services.draft_service import DraftService, QueueEntryExistsError
from dynasty_cube.services.pool_service import CardNotFoundError
from dynasty_cube.services.team_service import (
    TeamAlreadyExistsError,
    TeamNotFoundError,
    TeamService,
)

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> TeamService:
    return TeamService(db)


# ─── Teams ──────────────────────────────────────────────

@router.post("/teams", response_model=TeamRead, status_code=201)
async def create_team(body: TeamCreate, svc: TeamService = Depends(_svc)):
    try:
        return await svc.create_team(
            team_id=body.id, name=body.name, emoji=body.emoji, motto=body.motto
        )
    except TeamAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/teams", response_model=list[TeamRead])
async def list_teams(svc: TeamService = Depends(_svc)):
    return await svc.list_teams()


@router.get("/teams/{team_id}", response_model=TeamRead)
async def get_team(team_id: str, svc: TeamService = Depends(_svc)):
    team = await svc.get_team(team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


# ─── Picks & queue ──────────────────────────────────────

@router.get("/teams/{team_id}/picks", response_model=list[PickRead])
async def list_team_picks(
    team_id: str, draft: DraftService = Depends(get_draft_service)
):
    return await draft.list_team_picks(team_id)


@router.post("/teams/{team_id}/queue", response_model=QueueEntryRead, status_code=201)
async def add_to_queue(
    team_id: str,
    body: QueueEntryCreate,
    draft: DraftService = Depends(get_draft_service),
):
    try:
        return await draft.add_to_queue(team_id, body.card_pool_id, pinned=body.pinned)
    except (TeamNotFoundError, CardNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except QueueEntryExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/teams/{team_id}/queue", response_model=list[QueueEntryRead])
async def list_queue(team_id: str, draft: DraftService = Depends(get_draft_service)):
    return await draft.list_queue(team_id)
