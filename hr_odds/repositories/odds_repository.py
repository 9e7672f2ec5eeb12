"""
Odds repositories: the live quote table and the append-only history table.

Usage:
    quotes = OddsRepository(db)
    quotes.upsert_quote(row)
    history = OddsHistoryRepository(db)
    history.append(row)
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, or_, select

from hr_odds.models import OddsHistorySample, OddsQuote
from hr_odds.repositories.base import BaseRepository

QUOTE_KEY = ("market_key", "player_id", "game_id", "bookmaker")


class OddsRepository(BaseRepository[OddsQuote]):
    """Latest quote per (market_key, player_id, game_id, bookmaker)."""

    def __init__(self, db):
        super().__init__(OddsQuote, db)

    def upsert_quote(self, row: Dict[str, Any]) -> int:
        return self.upsert([row], QUOTE_KEY)

    def player_ids_for_game(self, game_id: str) -> List[str]:
        """Distinct players that already have a quote for ``game_id``."""
        stmt = (
            select(OddsQuote.player_id)
            .where(OddsQuote.game_id == game_id, OddsQuote.player_id.is_not(None))
            .distinct()
        )
        return list(self.db.scalars(stmt))

    def delete_stale(self, cutoff: datetime, stale_game_ids) -> int:
        """Delete quotes captured before ``cutoff`` or belonging to stale games."""
        result = self.execute(
            delete(OddsQuote)
            .where(or_(OddsQuote.captured_at < cutoff, OddsQuote.game_id.in_(stale_game_ids)))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0


class OddsHistoryRepository(BaseRepository[OddsHistorySample]):
    """Append-only quote snapshots."""

    def __init__(self, db):
        super().__init__(OddsHistorySample, db)

    def append(self, row: Dict[str, Any]) -> int:
        return self.insert([row])

    def series_for_player(
        self,
        player_id: str,
        market_keys: Sequence[str],
        bookmakers: Sequence[str],
        game_id: Optional[str] = None,
    ) -> List[OddsHistorySample]:
        """Chronological samples for one player, optionally limited to one game."""
        stmt = select(OddsHistorySample).where(
            OddsHistorySample.player_id == player_id,
            OddsHistorySample.market_key.in_(list(market_keys)),
            OddsHistorySample.bookmaker.in_(list(bookmakers)),
        )
        if game_id:
            stmt = stmt.where(OddsHistorySample.game_id == game_id)
        return list(self.db.scalars(stmt.order_by(OddsHistorySample.captured_at.asc())))

    def samples_between(
        self,
        player_ids: Sequence[str],
        game_ids: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> List[OddsHistorySample]:
        """Samples for any of the players/games captured in ``[start, end)``."""
        stmt = (
            select(OddsHistorySample)
            .where(
                OddsHistorySample.player_id.in_(list(player_ids)),
                OddsHistorySample.game_id.in_(list(game_ids)),
                OddsHistorySample.captured_at >= start,
                OddsHistorySample.captured_at < end,
            )
            .order_by(OddsHistorySample.captured_at.asc())
        )
        return list(self.db.scalars(stmt))

    def delete_stale(self, cutoff: datetime, stale_game_ids) -> int:
        """Delete samples captured before ``cutoff`` or belonging to stale games."""
        result = self.execute(
            delete(OddsHistorySample)
            .where(or_(OddsHistorySample.captured_at < cutoff, OddsHistorySample.game_id.in_(stale_game_ids)))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
