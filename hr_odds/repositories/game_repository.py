"""
Game repository.

Usage:
    repo = GameRepository(db)
    repo.upsert_game(record)
    todays = repo.find_for_eastern_day()
    window = repo.find_in_window(start, end)
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, select

from hr_odds.models import Game
from hr_odds.repositories.base import BaseRepository
from hr_odds.utils.timezone import eastern_day_bounds

GAME_COLUMNS = ("game_id", "sport_key", "game_date", "commence_time", "home_team", "away_team")


class GameRepository(BaseRepository[Game]):
    """Repository for game rows."""

    def __init__(self, db):
        super().__init__(Game, db)

    def upsert_game(self, row: Dict[str, Any]) -> int:
        """Insert or overwrite a game keyed by ``game_id`` (last writer wins)."""
        return self.upsert([{k: row[k] for k in GAME_COLUMNS}], ["game_id"])

    def find_by_ids(self, game_ids: Sequence[str]) -> List[Game]:
        if not game_ids:
            return []
        return self.where(Game.game_id.in_(list(game_ids)))

    def find_in_window(self, start: datetime, end: datetime) -> List[Game]:
        """Games with ``start <= commence_time < end``, earliest first."""
        stmt = (
            select(Game)
            .where(Game.commence_time >= start, Game.commence_time < end)
            .order_by(Game.commence_time.asc())
        )
        return list(self.db.scalars(stmt))

    def find_for_eastern_day(self, day: Optional[date] = None, now: Optional[datetime] = None) -> List[Game]:
        """Games whose commence time falls on ``day`` (default: today) in US-Eastern time."""
        start, end = eastern_day_bounds(day, now=now)
        return self.find_in_window(start, end)

    def find_recent(self, limit: int = 500) -> List[Game]:
        """Latest games first, regardless of date."""
        stmt = select(Game).order_by(Game.commence_time.desc()).limit(limit)
        return list(self.db.scalars(stmt))

    def stale_game_ids(self, cutoff: datetime):
        """Subquery of game ids that commenced before ``cutoff``."""
        return select(Game.game_id).where(Game.commence_time < cutoff)

    def delete_before(self, cutoff: datetime) -> int:
        """Delete games that commenced before ``cutoff``; returns rows deleted."""
        result = self.execute(
            delete(Game)
            .where(Game.commence_time < cutoff)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
