"""CubeCobra ELO sync route.

Learn: The sync reports partial failure in its body rather than its
status code. Only a request with no cube id at all (neither in the body
nor DYNASTY_CUBE_DEFAULT_CUBE_ID) is a client error.
"""

from fastapi import APIRouter, Depends, HTTPException

from dynasty_cube.api.dependencies import get_rating_service
from dynasty_cube.config import settings
from dynasty_cube.schemas.rating import RatingSyncRequest, RatingSyncResult
from dynasty_cube.services.rating_service import RatingService

router = APIRouter()


@router.post("/ratings/sync", response_model=RatingSyncResult)
async def sync_ratings(
    body: RatingSyncRequest,
    ratings: RatingService = Depends(get_rating_service),
):
    cube_id = body.cube_id or settings.default_cube_id
    if not cube_id:
        raise HTTPException(status_code=422, detail="cube_id is required")
    return await ratings.sync_from_cube(cube_id)
