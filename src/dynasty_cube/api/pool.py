"""Card pool API routes.

Learn: Every write here goes through PoolService, which invalidates the
duplicate card id cache on commit. GET /pool/duplicates reads that
cache, so it is cheap until the next write.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dynasty_cube.api.dependencies import get_cubecobra_client, get_pool_service
from dynasty_cube.cubecobra import (
    CubeCobraClient,
    CubeCobraError,
    CubeNotFoundError,
    extract_card_data_map,
)
from dynasty_cube.schemas.card import (
    CubeImportRequest,
    CubeImportResult,
    DuplicateCardIds,
    PoolCardRead,
    PoolCardsCreate,
    PoolCardStatus,
)
from dynasty_cube.services.pool_service import CardNotFoundError, PoolService

router = APIRouter()


@router.post("/pool/cards", response_model=list[PoolCardRead], status_code=201)
async def add_cards(body: PoolCardsCreate, pool: PoolService = Depends(get_pool_service)):
    return await pool.add_cards(body.cards)


@router.get("/pool/cards", response_model=list[PoolCardStatus])
async def list_cards(
    pool_name: Optional[str] = Query(None),
    pool: PoolService = Depends(get_pool_service),
):
    rows = await pool.list_cards(pool_name)
    return [
        PoolCardStatus.model_validate(card).model_copy(
            update={"is_drafted": team_id is not None, "drafted_by_team_id": team_id}
        )
        for card, team_id in rows
    ]


@router.get("/pool/available", response_model=list[PoolCardRead])
async def list_available(
    pool_name: Optional[str] = Query(None),
    pool: PoolService = Depends(get_pool_service),
):
    return await pool.list_available(pool_name)


@router.delete("/pool/cards/{card_pool_id}", status_code=204)
async def remove_card(card_pool_id: uuid.UUID, pool: PoolService = Depends(get_pool_service)):
    try:
        await pool.remove_card(card_pool_id)
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/pool/duplicates", response_model=DuplicateCardIds)
async def duplicate_card_ids(pool: PoolService = Depends(get_pool_service)):
    card_ids = sorted(await pool.duplicate_card_ids())
    return DuplicateCardIds(card_ids=card_ids, count=len(card_ids))


@router.post("/pool/import-cube", response_model=CubeImportResult, status_code=201)
async def import_cube(
    body: CubeImportRequest,
    pool: PoolService = Depends(get_pool_service),
    cubecobra: CubeCobraClient = Depends(get_cubecobra_client),
):
    """Copy a CubeCobra cube's mainboard into the pool."""
    try:
        cube_data = await cubecobra.request_cube(body.cube_id)
    except CubeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CubeCobraError as e:
        raise HTTPException(status_code=502, detail=str(e))

    card_map = extract_card_data_map(cube_data)
    imported, skipped = await pool.import_cube_cards(card_map, pool_name=body.pool_name)
    return CubeImportResult(cube_name=cube_data.name, imported=imported, skipped=skipped)
