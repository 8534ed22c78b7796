"""API route aggregation.

All routers registered here get mounted in main.py under /api/v1.
The live draft stream is not one of them: it is mounted at
/api/draft-stream/{session_id}, where the draft board expects it.
"""

from fastapi import APIRouter

from dynasty_cube.api.cubes import router as cubes_router
from dynasty_cube.api.draft import router as draft_router
from dynasty_cube.api.health import router as health_router
from dynasty_cube.api.pool import router as pool_router
from dynasty_cube.api.ratings import router as ratings_router
from dynasty_cube.api.teams import router as teams_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(teams_router, tags=["teams", "queue"])
api_router.include_router(pool_router, tags=["pool"])
api_router.include_router(draft_router, tags=["draft"])
api_router.include_router(cubes_router, tags=["cubecobra"])
api_router.include_router(ratings_router, tags=["ratings"])
