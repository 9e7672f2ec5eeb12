"""Player repository."""
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import func

from hr_odds.models import Player
from hr_odds.repositories.base import BaseRepository


class PlayerRepository(BaseRepository[Player]):
    """Repository for players."""

    def __init__(self, db):
        super().__init__(Player, db)

    def upsert_player(self, player_id: str, full_name: str, team_abbr: Optional[str] = None) -> int:
        """
        Insert or update a player.

        A missing ``team_abbr`` never clears a team that is already stored;
        a different non-null team replaces it.
        """
        return self.upsert(
            [{"player_id": player_id, "full_name": full_name, "team_abbr": team_abbr}],
            ["player_id"],
            keep_existing_when_null=["team_abbr"],
        )

    def find_by_ids(self, player_ids: Sequence[str]) -> List[Player]:
        if not player_ids:
            return []
        return self.where(Player.player_id.in_(list(player_ids)))

    def find_by_team_codes(self, codes: Iterable[str]) -> List[Player]:
        """Players whose ``team_abbr`` equals any of ``codes``, ignoring case."""
        lowered = sorted({c.lower() for c in codes if c})
        if not lowered:
            return []
        return self.where(func.lower(Player.team_abbr).in_(lowered))
