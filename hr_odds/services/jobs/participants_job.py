"""
Participants job: link players to the games they can appear in.

Two passes run for every in-scope game:

1. Team linking - every known player whose team matches the home or away
   team (any case) gets a participant row.
2. Odds backfill - every player that already has a quote for the game gets
   a participant row, covering odds ingested before the players had a team.

A batch that fails to write is rolled back and counted in
``failed_batches``; the remaining batches still run.
"""
import logging
from datetime import timedelta
from typing import List, Tuple

from sqlalchemy.exc import SQLAlchemyError

from hr_odds.core.exceptions import StoreError
from hr_odds.core.metrics import record_participant_batch_failure, record_rows_written
from hr_odds.models import Game
from hr_odds.repositories import GameRepository, OddsRepository, ParticipantRepository, PlayerRepository
from hr_odds.services.jobs.base import JobContext

logger = logging.getLogger(__name__)


def team_code_variants(*codes) -> List[str]:
    """Raw, upper-case and lower-case spellings of each code, de-duplicated."""
    variants = []
    for code in codes:
        if not code:
            continue
        code = str(code).strip()
        for spelling in (code, code.upper(), code.lower()):
            if spelling not in variants:
                variants.append(spelling)
    return variants


def games_in_scope(ctx: JobContext) -> Tuple[List[Game], str]:
    """
    Today's (US-Eastern) games, or every game in the fallback window around
    now when the day query fails.

    Returns:
        (games, scope name) where scope is ``"today"`` or ``"window"``
    """
    repo = GameRepository(ctx.db)
    now = ctx.current_time()
    try:
        return repo.find_for_eastern_day(now=now), "today"
    except SQLAlchemyError as e:
        ctx.db.rollback()
        logger.warning(f"Today's games query failed, using fallback window: {e}")

    start = now - timedelta(hours=ctx.settings.PARTICIPANT_WINDOW_BEFORE_HOURS)
    end = now + timedelta(hours=ctx.settings.PARTICIPANT_WINDOW_AFTER_HOURS)
    return repo.find_in_window(start, end), "window"


class _BatchWriter:
    """Upserts participant batches, absorbing and counting failures."""

    def __init__(self, ctx: JobContext):
        self.repo = ParticipantRepository(ctx.db)
        self.failed = 0

    def write(self, rows: List[dict], pass_name: str, game_id: str) -> int:
        if not rows:
            return 0
        try:
            written = self.repo.upsert_participants(rows)
            self.repo.save()
            return written
        except StoreError as e:
            self.repo.rollback()
            self.failed += 1
            record_participant_batch_failure(pass_name)
            logger.error(f"Participant {pass_name} batch failed for game {game_id}: {e.message}")
            return 0


async def run_participants_job(ctx: JobContext) -> dict:
    games, scope = games_in_scope(ctx)
    if not games:
        return {
            "ok": True,
            "games": 0,
            "upserts": 0,
            "backfills": 0,
            "failed_batches": 0,
            "message": "No games in scope.",
        }

    players = PlayerRepository(ctx.db)
    quotes = OddsRepository(ctx.db)
    writer = _BatchWriter(ctx)

    # Plain tuples so rollbacks inside the loop do not expire what we iterate
    targets = [(g.game_id, g.home_team, g.away_team) for g in games]

    upserts = backfills = 0
    for game_id, home, away in targets:
        roster = players.find_by_team_codes(team_code_variants(home, away))
        rows = [
            {"game_id": game_id, "player_id": p.player_id, "team_abbr": p.team_abbr or home}
            for p in roster
        ]
        upserts += writer.write(rows, "team", game_id)

        quoted_ids = quotes.player_ids_for_game(game_id)
        backfill_rows = [
            {"game_id": game_id, "player_id": p.player_id, "team_abbr": p.team_abbr or home}
            for p in players.find_by_ids(quoted_ids)
        ]
        backfills += writer.write(backfill_rows, "odds_backfill", game_id)

    record_rows_written("game_participants", upserts + backfills)
    logger.info(
        f"Participants linked for {len(targets)} games ({scope})",
        extra={"upserts": upserts, "backfills": backfills, "failed_batches": writer.failed},
    )

    return {
        "ok": True,
        "games": len(targets),
        "upserts": upserts,
        "backfills": backfills,
        "failed_batches": writer.failed,
        "message": f"Participants linked for {'today' if scope == 'today' else 'current window'}.",
    }
