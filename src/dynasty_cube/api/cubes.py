"""Single-card CubeCobra ELO lookup.

Learn: This route calls request_cube() rather than get_card_elo() because
it has to tell "the cube doesn't exist" (404) apart from "CubeCobra is
down" (502). get_card_elo() collapses both into None.

The card name is a path parameter because split cards ("Fire // Ice")
contain slashes.
"""

from fastapi import APIRouter, Depends, HTTPException

from dynasty_cube.api.dependencies import get_cubecobra_client
from dynasty_cube.cubecobra import (
    CubeCobraClient,
    CubeCobraError,
    CubeNotFoundError,
    extract_elo_map,
)
from dynasty_cube.schemas.rating import CardEloRead

router = APIRouter()


@router.get("/cubes/{cube_id}/cards/{card_name:path}/elo", response_model=CardEloRead)
async def get_card_elo(
    cube_id: str,
    card_name: str,
    cubecobra: CubeCobraClient = Depends(get_cubecobra_client),
):
    try:
        cube_data = await cubecobra.request_cube(cube_id)
    except CubeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CubeCobraError as e:
        raise HTTPException(status_code=502, detail=str(e))

    elo = extract_elo_map(cube_data).get(card_name.lower())
    if elo is None:
        raise HTTPException(
            status_code=404, detail=f"{card_name} has no ELO in cube {cube_id}"
        )
    return CardEloRead(card_name=card_name, cube_id=cube_id, cube_name=cube_data.name, elo=elo)
