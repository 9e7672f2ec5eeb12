"""Tests for the cleanup job and its post-midnight guard."""
from datetime import datetime, timedelta, timezone

import pytest

from hr_odds.models import Game, GameParticipant, OddsHistorySample, OddsQuote
from hr_odds.services.jobs import run_job
from hr_odds.services.jobs.cleanup_job import in_cleanup_window

from conftest import seed_game, seed_player, seed_quote

# 00:01 EDT on 2025-07-16
JUST_AFTER_MIDNIGHT_ET = datetime(2025, 7, 16, 4, 1, 20, tzinfo=timezone.utc)
MIDDAY_ET = datetime(2025, 7, 16, 16, 0, tzinfo=timezone.utc)


def _seed_two_days(session):
    seed_game(session, "yesterday", datetime(2025, 7, 15, 23, 5, tzinfo=timezone.utc))
    seed_game(session, "today", datetime(2025, 7, 16, 23, 5, tzinfo=timezone.utc))
    seed_player(session, "judge", team_abbr="NYY")
    seed_quote(session, "yesterday", "judge", captured_at=datetime(2025, 7, 15, 22, 0, tzinfo=timezone.utc), history_samples=3)
    seed_quote(session, "today", "judge", captured_at=datetime(2025, 7, 16, 14, 0, tzinfo=timezone.utc), history_samples=2)


class TestCleanupWindow:

    @pytest.mark.parametrize("now, expected", [
        (datetime(2025, 7, 16, 4, 1, 0, tzinfo=timezone.utc), True),     # 00:01:00 EDT
        (datetime(2025, 7, 16, 4, 1, 59, tzinfo=timezone.utc), True),    # 00:01:59 EDT
        (datetime(2025, 7, 16, 4, 0, 59, tzinfo=timezone.utc), False),   # 00:00:59 EDT
        (datetime(2025, 7, 16, 4, 2, 0, tzinfo=timezone.utc), False),    # 00:02 EDT
        (datetime(2025, 1, 16, 5, 1, 30, tzinfo=timezone.utc), True),    # 00:01 EST
        (datetime(2025, 1, 16, 4, 1, 30, tzinfo=timezone.utc), False),   # 23:01 EST
    ])
    def test_window(self, now, expected):
        assert in_cleanup_window(now, start_minute=1, window_minutes=1) is expected


class TestCleanupJob:

    @pytest.mark.asyncio
    async def test_skipped_outside_window(self, database, odds_client, test_settings, db_session):
        _seed_two_days(db_session)

        status, body = await run_job("cleanup", database, odds_client, test_settings, now=MIDDAY_ET)

        assert status == 200
        assert body["ok"] is True
        assert "skipped" in body
        assert db_session.query(Game).count() == 2

    @pytest.mark.asyncio
    async def test_force_purges_only_yesterday(self, database, odds_client, test_settings, db_session):
        _seed_two_days(db_session)

        status, body = await run_job(
            "cleanup", database, odds_client, test_settings, options={"force": True}, now=MIDDAY_ET
        )

        assert status == 200
        assert body["ok"] is True
        assert body["forced"] is True
        assert body["purged_before_local_date"] == "2025-07-16"
        assert body["deleted"] == {"odds_history": 3, "odds": 1, "game_participants": 1, "games": 1}

        assert [g.game_id for g in db_session.query(Game)] == ["today"]
        assert {q.game_id for q in db_session.query(OddsQuote)} == {"today"}
        assert {s.game_id for s in db_session.query(OddsHistorySample)} == {"today"}
        assert db_session.query(OddsHistorySample).count() == 2
        assert {p.game_id for p in db_session.query(GameParticipant)} == {"today"}

    @pytest.mark.asyncio
    async def test_runs_inside_window_without_force(self, database, odds_client, test_settings, db_session):
        _seed_two_days(db_session)

        status, body = await run_job("cleanup", database, odds_client, test_settings, now=JUST_AFTER_MIDNIGHT_ET)

        assert status == 200
        assert body["forced"] is False
        assert db_session.query(Game).count() == 1

    @pytest.mark.asyncio
    async def test_stale_samples_of_todays_game_are_purged(self, database, odds_client, test_settings, db_session):
        seed_game(db_session, "today", datetime(2025, 7, 16, 23, 5, tzinfo=timezone.utc))
        seed_player(db_session, "judge", team_abbr="NYY")
        seed_quote(db_session, "today", "judge", captured_at=datetime(2025, 7, 15, 20, 0, tzinfo=timezone.utc))

        await run_job("cleanup", database, odds_client, test_settings, options={"force": True}, now=MIDDAY_ET)

        assert db_session.query(Game).count() == 1
        assert db_session.query(OddsQuote).count() == 0
        assert db_session.query(OddsHistorySample).count() == 0

    @pytest.mark.asyncio
    async def test_failure_rolls_back_every_delete(
        self, database, odds_client, test_settings, db_session, monkeypatch
    ):
        from hr_odds.core.exceptions import StoreError
        from hr_odds.repositories import GameRepository

        _seed_two_days(db_session)

        def broken_delete(self, cutoff):
            raise StoreError("canceling statement due to lock timeout")

        monkeypatch.setattr(GameRepository, "delete_before", broken_delete)

        status, body = await run_job(
            "cleanup", database, odds_client, test_settings, options={"force": True}, now=MIDDAY_ET
        )

        assert status == 500
        assert body["ok"] is False
        assert db_session.query(OddsHistorySample).count() == 5
        assert db_session.query(OddsQuote).count() == 2
        assert db_session.query(GameParticipant).count() == 2
