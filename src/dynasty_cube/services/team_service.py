"""Team service — business logic for league teams.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database.
This makes the code testable (test services without HTTP)
and reusable (the CLI and the API share the same logic).
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dynasty_cube.db.models import Team


class TeamNotFoundError(Exception):
    pass


class TeamAlreadyExistsError(Exception):
    pass


class TeamService:
    """Business logic for team management."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_team(
        self, team_id: str, name: str, emoji: str = "", motto: str = ""
    ) -> Team:
        if await self.db.get(Team, team_id) is not None:
            raise TeamAlreadyExistsError(f"Team {team_id} already exists")

        team = Team(id=team_id, name=name, emoji=emoji, motto=motto)
        self.db.add(team)
        await self.db.commit()
        return team

    async def list_teams(self) -> list[Team]:
        result = await self.db.execute(select(Team).order_by(Team.name))
        return list(result.scalars().all())

    async def get_team(self, team_id: str) -> Team | None:
        return await self.db.get(Team, team_id)

    async def require_team(self, team_id: str) -> Team:
        team = await self.get_team(team_id)
        if team is None:
            raise TeamNotFoundError(f"Team {team_id} not found")
        return team
