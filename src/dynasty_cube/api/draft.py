"""Draft session and pick API routes.

Learn: POST /draft-sessions/{id}/picks is the hot path of a live draft.
The route only maps errors; DraftService commits the pick, cleans the
queues and publishes the `new_pick` event that every open
/api/draft-stream/{id} connection relays.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException

from dynasty_cube.api.dependencies import get_draft_service
from dynasty_cube.schemas.draft import (
    DraftSessionCreate,
    DraftSessionRead,
    DraftSessionStatusUpdate,
    PickCreate,
    PickRead,
)
from dynasty_cube.services.draft_service import (
    CardAlreadyDraftedError,
    DraftService,
    DraftSessionNotActiveError,
    DraftSessionNotFoundError,
    DuplicateTeamCardError,
)
from dynasty_cube.services.pool_service import CardNotFoundError
from dynasty_cube.services.team_service import TeamNotFoundError

router = APIRouter()


# ─── Sessions ───────────────────────────────────────────

@router.post("/draft-sessions", response_model=DraftSessionRead, status_code=201)
async def create_session(
    body: DraftSessionCreate, draft: DraftService = Depends(get_draft_service)
):
    return await draft.create_session(status=body.status, total_rounds=body.total_rounds)


@router.get("/draft-sessions/{session_id}", response_model=DraftSessionRead)
async def get_session(session_id: uuid.UUID, draft: DraftService = Depends(get_draft_service)):
    session = await draft.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Draft session not found")
    return session


@router.post("/draft-sessions/{session_id}/status", response_model=DraftSessionRead)
async def set_session_status(
    session_id: uuid.UUID,
    body: DraftSessionStatusUpdate,
    draft: DraftService = Depends(get_draft_service),
):
    try:
        return await draft.set_session_status(session_id, body.status)
    except DraftSessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ─── Picks ──────────────────────────────────────────────

@router.post("/draft-sessions/{session_id}/picks", response_model=PickRead, status_code=201)
async def make_pick(
    session_id: uuid.UUID,
    body: PickCreate,
    draft: DraftService = Depends(get_draft_service),
):
    try:
        return await draft.make_pick(session_id, body.team_id, body.card_pool_id)
    except (DraftSessionNotFoundError, TeamNotFoundError, CardNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (
        DraftSessionNotActiveError,
        CardAlreadyDraftedError,
        DuplicateTeamCardError,
    ) as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/draft-sessions/{session_id}/picks", response_model=list[PickRead])
async def list_session_picks(
    session_id: uuid.UUID, draft: DraftService = Depends(get_draft_service)
):
    return await draft.list_session_picks(session_id)
