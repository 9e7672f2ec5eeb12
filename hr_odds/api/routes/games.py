"""Games for the dashboard picker, with their linked players."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from hr_odds.api.deps import is_truthy
from hr_odds.core.database import get_db
from hr_odds.core.rate_limit import limiter
from hr_odds.models import Game
from hr_odds.repositories import GameRepository, ParticipantRepository
from hr_odds.utils.timezone import ensure_utc

router = APIRouter(prefix="/api/games", tags=["games"])

RECENT_GAMES_LIMIT = 500


def game_to_dict(game: Game, participants: list) -> dict:
    return {
        "game_id": game.game_id,
        "home_team": game.home_team,
        "away_team": game.away_team,
        "commence_time": ensure_utc(game.commence_time).isoformat(),
        "game_date": game.game_date.isoformat() if game.game_date else None,
        "participants": participants,
    }


@router.get("")
@limiter.limit("60/minute")
async def list_games(
    request: Request,
    game_date: Optional[date] = Query(None, alias="date", description="US-Eastern day, default today"),
    include_past: Optional[str] = Query(None, description="1 to return the latest games regardless of date"),
    db: Session = Depends(get_db),
):
    """
    Games for one US-Eastern day (default today), earliest first.

    With ``include_past=1`` the latest 500 games are returned instead,
    newest first.
    """
    repo = GameRepository(db)
    if is_truthy(include_past):
        games = repo.find_recent(RECENT_GAMES_LIMIT)
    else:
        games = repo.find_for_eastern_day(game_date)

    by_game = {g.game_id: [] for g in games}
    for participant, player in ParticipantRepository(db).find_with_players(list(by_game)):
        by_game[participant.game_id].append({
            "player_id": player.player_id,
            "full_name": player.full_name,
            "team_abbr": participant.team_abbr,
        })

    return {"ok": True, "data": [game_to_dict(g, by_game[g.game_id]) for g in games]}
