"""Game participant repository."""
from typing import Any, Dict, List, Sequence, Tuple

from sqlalchemy import delete, select

from hr_odds.models import GameParticipant, Player
from hr_odds.repositories.base import BaseRepository


class ParticipantRepository(BaseRepository[GameParticipant]):
    """Repository for (game, player) participation rows."""

    def __init__(self, db):
        super().__init__(GameParticipant, db)

    def upsert_participants(self, rows: Sequence[Dict[str, Any]]) -> int:
        """Upsert ``{game_id, player_id, team_abbr}`` rows keyed by (game_id, player_id).

        A NULL incoming team keeps the stored one.
        """
        return self.upsert(
            rows, ["game_id", "player_id"], update_columns=["team_abbr"], keep_existing_when_null=["team_abbr"]
        )

    def find_with_players(self, game_ids: Sequence[str]) -> List[Tuple[GameParticipant, Player]]:
        """Participants of the given games joined to their player rows."""
        if not game_ids:
            return []
        stmt = (
            select(GameParticipant, Player)
            .join(Player, Player.player_id == GameParticipant.player_id)
            .where(GameParticipant.game_id.in_(list(game_ids)))
        )
        return [(gp, p) for gp, p in self.db.execute(stmt).all()]

    def delete_for_games(self, game_ids_subquery) -> int:
        result = self.execute(
            delete(GameParticipant)
            .where(GameParticipant.game_id.in_(game_ids_subquery))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
