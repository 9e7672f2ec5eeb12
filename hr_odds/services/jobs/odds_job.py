"""
Odds job: player home run props from the allowed bookmakers.

For every priced outcome the job writes, in order: the player, the
game participant row, the live quote and one history sample. Writes for an
outcome are committed together; any store failure aborts the run.
"""
import logging

from hr_odds.core.metrics import record_rows_written
from hr_odds.repositories import (
    GameRepository,
    OddsHistoryRepository,
    OddsRepository,
    ParticipantRepository,
    PlayerRepository,
    TeamRepository,
)
from hr_odds.schemas.odds_api import parse_provider_games
from hr_odds.services.jobs.base import JobContext
from hr_odds.services.odds_mapper import allowed_book, american_to_decimal

logger = logging.getLogger(__name__)


async def run_odds_job(ctx: JobContext) -> dict:
    payload = await ctx.client.fetch_player_home_run_odds()
    entries, malformed = parse_provider_games(payload)

    allowed = ctx.settings.ALLOWED_BOOKS
    market_key = ctx.settings.ODDS_API_MARKET

    teams = TeamRepository(ctx.db)
    games = GameRepository(ctx.db)
    players = PlayerRepository(ctx.db)
    participants = ParticipantRepository(ctx.db)
    quotes = OddsRepository(ctx.db)
    history = OddsHistoryRepository(ctx.db)

    upserts = snapshots = new_players = skipped = 0

    for entry in entries:
        record = entry.to_record()
        teams.upsert_teams([record.home_team, record.away_team])
        games.upsert_game(record.to_row())
        games.save()

        for bookmaker in entry.bookmakers:
            book = allowed_book(bookmaker.key, allowed)
            if book is None:
                continue

            for market in bookmaker.markets:
                if market.key != market_key:
                    continue

                for outcome in market.outcomes:
                    quote = outcome.to_quote()
                    if quote is None:
                        skipped += 1
                        continue

                    players.upsert_player(quote.player_id, quote.full_name, quote.team_abbr)

                    team_abbr = quote.team_abbr
                    if team_abbr is None:
                        known = players.find_by_ids([quote.player_id])
                        team_abbr = known[0].team_abbr if known else None
                    participants.upsert_participants([
                        {"game_id": record.game_id, "player_id": quote.player_id, "team_abbr": team_abbr}
                    ])

                    row = {
                        "market_key": market_key,
                        "player_id": quote.player_id,
                        "game_id": record.game_id,
                        "bookmaker": book,
                        "american_odds": quote.american_odds,
                        "decimal_odds": american_to_decimal(quote.american_odds),
                        "captured_at": ctx.current_time(),
                    }
                    quotes.upsert_quote(row)
                    history.append(row)
                    quotes.save()

                    new_players += 1
                    upserts += 1
                    snapshots += 1

    record_rows_written("players", new_players)
    record_rows_written("odds", upserts)
    record_rows_written("odds_history", snapshots, operation="insert")
    logger.info(
        f"Odds job: {upserts} quotes, {snapshots} snapshots across {len(entries)} games",
        extra={"upserts": upserts, "snapshots": snapshots, "skipped": skipped, "malformed": malformed},
    )

    return {
        "ok": True,
        "upserts": upserts,
        "snapshots": snapshots,
        "newPlayers": new_players,
        "skipped": skipped,
    }
