"""Odds history for the chart and the allowed bookmaker list."""
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from hr_odds.api.deps import get_settings, split_ids
from hr_odds.api.routes.players import sample_to_dict
from hr_odds.core.database import get_db
from hr_odds.core.rate_limit import limiter
from hr_odds.repositories import OddsHistoryRepository
from hr_odds.services.odds_mapper import BOOK_COLORS
from hr_odds.utils.timezone import eastern_day_bounds

router = APIRouter(prefix="/api", tags=["odds"])


@router.get("/odds/history")
@limiter.limit("60/minute")
async def odds_history(
    request: Request,
    player_ids: List[str] = Query(default=[]),
    game_ids: List[str] = Query(default=[]),
    db: Session = Depends(get_db),
):
    """Today's (US-Eastern) history samples for the selected players and games."""
    players = split_ids(player_ids)
    games = split_ids(game_ids)
    if not players or not games:
        return JSONResponse({"ok": False, "error": "player_ids and game_ids are required"}, status_code=400)

    start, end = eastern_day_bounds()
    samples = OddsHistoryRepository(db).samples_between(players, games, start, end)
    data = []
    for sample in samples:
        row = sample_to_dict(sample)
        row["player_id"] = sample.player_id
        data.append(row)
    return {"ok": True, "data": data}


@router.get("/books")
async def books(settings=Depends(get_settings)):
    return {
        "ok": True,
        "data": [{"key": b, "color": BOOK_COLORS.get(b)} for b in settings.ALLOWED_BOOKS],
    }
