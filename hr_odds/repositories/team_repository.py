"""Team repository: teams are created lazily whenever a game references them."""
from typing import Iterable

from hr_odds.models import Team
from hr_odds.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Repository for MLB teams keyed by abbreviation."""

    def __init__(self, db):
        super().__init__(Team, db)

    def upsert_teams(self, abbrs: Iterable[str]) -> int:
        """Ensure a row exists for every abbreviation (``team_id`` mirrors ``abbr``)."""
        unique = list(dict.fromkeys(a for a in abbrs if a))
        return self.upsert([{"abbr": a, "team_id": a} for a in unique], ["abbr"])
