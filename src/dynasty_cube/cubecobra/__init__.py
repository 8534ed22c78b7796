"""CubeCobra integration — rate-limited cube fetches and ELO extraction.

Learn: CubeCobra is the external source of truth for card ratings.
Everything that talks to it goes through CubeCobraClient, and every
request through one shared RateLimiter.
"""

from dynasty_cube.cubecobra.client import (
    CubeCobraClient,
    CubeCobraError,
    CubeNotFoundError,
    extract_card_data_map,
    extract_elo_map,
)
from dynasty_cube.cubecobra.rate_limit import RateLimiter

__all__ = [
    "CubeCobraClient",
    "CubeCobraError",
    "CubeNotFoundError",
    "RateLimiter",
    "extract_card_data_map",
    "extract_elo_map",
]
