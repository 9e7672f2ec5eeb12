"""Players in selected games and a single player's odds history."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from hr_odds.api.deps import get_settings, split_ids
from hr_odds.core.database import get_db
from hr_odds.core.rate_limit import limiter
from hr_odds.repositories import OddsHistoryRepository, ParticipantRepository
from hr_odds.utils.timezone import ensure_utc

router = APIRouter(prefix="/api/players", tags=["players"])

# Market keys the dashboard may send for the home run prop
HOME_RUN_MARKET_ALIASES = {"batter_home_run", "batter_home_runs", "player_home_run", "player_home_runs"}


def resolve_market_key(requested: Optional[str], configured: str) -> str:
    """Map home run aliases (and no value) to the configured market key."""
    if not requested or requested.strip().lower() in HOME_RUN_MARKET_ALIASES:
        return configured
    return requested.strip()


def sample_to_dict(sample) -> dict:
    return {
        "captured_at": ensure_utc(sample.captured_at).isoformat(),
        "american_odds": sample.american_odds,
        "decimal_odds": sample.decimal_odds,
        "bookmaker": sample.bookmaker,
        "game_id": sample.game_id,
    }


@router.get("")
@limiter.limit("60/minute")
async def list_players(
    request: Request,
    game_ids: List[str] = Query(default=[], description="Comma separated or repeated game ids"),
    db: Session = Depends(get_db),
):
    """Participants of the given games, sorted by team then name."""
    ids = split_ids(game_ids)
    if not ids:
        return {"ok": True, "data": []}

    rows = {}
    for participant, player in ParticipantRepository(db).find_with_players(ids):
        key = (participant.game_id, player.player_id)
        if key in rows:
            continue
        team = participant.team_abbr or player.team_abbr
        rows[key] = {
            "player_id": player.player_id,
            "full_name": player.full_name,
            "team_abbr": team.lower() if team else None,
            "game_id": participant.game_id,
        }

    data = sorted(rows.values(), key=lambda r: (r["team_abbr"] or "", r["full_name"].lower()))
    return {"ok": True, "data": data}


@router.get("/{player_id}/odds")
@limiter.limit("60/minute")
async def player_odds(
    request: Request,
    player_id: str,
    game_id: Optional[str] = Query(None),
    market_key: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    settings=Depends(get_settings),
):
    """Chronological odds history for one player from the allowed books."""
    market = resolve_market_key(market_key, settings.ODDS_API_MARKET)
    samples = OddsHistoryRepository(db).series_for_player(
        player_id, [market], settings.ALLOWED_BOOKS, game_id=game_id
    )
    return {"ok": True, "data": [sample_to_dict(s) for s in samples]}
