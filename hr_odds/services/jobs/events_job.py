"""
Events job: pull the upcoming MLB schedule and upsert teams and games.

Each event is committed on its own, so a store failure part way through
keeps the events already written and aborts the rest of the run.
"""
import logging

from hr_odds.core.metrics import record_rows_written
from hr_odds.repositories import GameRepository, TeamRepository
from hr_odds.schemas.odds_api import parse_provider_games
from hr_odds.services.jobs.base import JobContext

logger = logging.getLogger(__name__)


async def run_events_job(ctx: JobContext) -> dict:
    """
    Returns:
        ``{ok, inserted, skipped}`` where ``inserted`` counts processed events
        (an upsert does not distinguish insert from update)
    """
    payload = await ctx.client.fetch_events()
    events, skipped = parse_provider_games(payload)
    logger.info(f"Fetched {len(events)} events ({skipped} malformed)")

    teams = TeamRepository(ctx.db)
    games = GameRepository(ctx.db)

    inserted = 0
    for event in events:
        record = event.to_record()
        teams.upsert_teams([record.home_team, record.away_team])
        games.upsert_game(record.to_row())
        games.save()
        inserted += 1

    record_rows_written("games", inserted)
    logger.info(f"Events job upserted {inserted} games", extra={"inserted": inserted, "skipped": skipped})

    body = {"ok": True, "inserted": inserted}
    if skipped:
        body["skipped"] = skipped
    return body
