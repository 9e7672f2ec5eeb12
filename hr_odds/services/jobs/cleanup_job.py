"""
Cleanup job: purge everything dated before today (US-Eastern).

Guarded to a short window just after Eastern midnight unless ``force`` is
set. All deletes run in one transaction, dependents first:
odds_history -> odds -> game_participants -> games.
"""
import logging
from datetime import datetime

from hr_odds.core.metrics import record_rows_written
from hr_odds.repositories import (
    GameRepository,
    OddsHistoryRepository,
    OddsRepository,
    ParticipantRepository,
)
from hr_odds.services.jobs.base import JobContext
from hr_odds.utils.timezone import eastern_midnight_utc, eastern_today, minutes_since_eastern_midnight

logger = logging.getLogger(__name__)


def in_cleanup_window(now: datetime, start_minute: int, window_minutes: int) -> bool:
    """True when ``now`` is within ``[00:start, 00:start+window)`` Eastern."""
    minutes = minutes_since_eastern_midnight(now)
    return start_minute <= minutes < start_minute + window_minutes


async def run_cleanup_job(ctx: JobContext) -> dict:
    now = ctx.current_time()
    force = bool(ctx.options.get("force"))

    if not force and not in_cleanup_window(
        now, ctx.settings.CLEANUP_START_MINUTE, ctx.settings.CLEANUP_WINDOW_MINUTES
    ):
        logger.info("Cleanup skipped: outside the post-midnight window")
        return {"ok": True, "skipped": "Outside the post-midnight ET window; pass force=1 to run anyway."}

    today = eastern_today(now)
    cutoff = eastern_midnight_utc(today)

    games = GameRepository(ctx.db)
    stale_games = games.stale_game_ids(cutoff)

    deleted = {
        "odds_history": OddsHistoryRepository(ctx.db).delete_stale(cutoff, stale_games),
        "odds": OddsRepository(ctx.db).delete_stale(cutoff, stale_games),
        "game_participants": ParticipantRepository(ctx.db).delete_for_games(stale_games),
        "games": games.delete_before(cutoff),
    }
    games.save()

    for table, count in deleted.items():
        record_rows_written(table, count, operation="delete")
    logger.info(f"Cleanup purged rows dated before {today.isoformat()}", extra={"deleted": deleted})

    return {
        "ok": True,
        "purged_before_local_date": today.isoformat(),
        "forced": force,
        "deleted": deleted,
    }
