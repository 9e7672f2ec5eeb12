"""Tests for the events job."""
from datetime import date

import pytest

from hr_odds.models import Game, Team
from hr_odds.services.jobs import run_job

from conftest import EVENTS_PAYLOAD, NOON_ET


class TestEventsJob:

    @pytest.mark.asyncio
    async def test_upserts_teams_and_games(self, database, odds_client, provider, test_settings, db_session):
        provider.respond("events", EVENTS_PAYLOAD)

        status, body = await run_job("events", database, odds_client, test_settings, now=NOON_ET)

        assert status == 200
        assert body == {"ok": True, "inserted": 2}
        assert {t.abbr for t in db_session.query(Team).all()} == {"NYY", "BOS", "LAD", "SF"}

        late = db_session.get(Game, "evt-sf-lad")
        assert late.home_team == "LAD"
        assert late.away_team == "SF"
        assert late.game_date == date(2025, 7, 16)

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, database, odds_client, provider, test_settings, db_session):
        provider.respond("events", EVENTS_PAYLOAD)

        await run_job("events", database, odds_client, test_settings)
        moved = [dict(EVENTS_PAYLOAD[0], commence_time="2025-07-16T17:05:00Z"), EVENTS_PAYLOAD[1]]
        provider.respond("events", moved)
        status, body = await run_job("events", database, odds_client, test_settings)

        assert status == 200
        assert body["inserted"] == 2
        assert db_session.query(Game).count() == 2
        assert db_session.get(Game, "evt-bos-nyy").commence_time.hour == 17

    @pytest.mark.asyncio
    async def test_malformed_events_are_skipped(self, database, odds_client, provider, test_settings):
        provider.respond("events", [EVENTS_PAYLOAD[0], {"id": "broken"}])

        status, body = await run_job("events", database, odds_client, test_settings)

        assert status == 200
        assert body == {"ok": True, "inserted": 1, "skipped": 1}

    @pytest.mark.asyncio
    async def test_upstream_failure_reports_500(self, database, odds_client, provider, test_settings):
        provider.respond("events", {"message": "quota exceeded"}, status=429)

        status, body = await run_job("events", database, odds_client, test_settings)

        assert status == 500
        assert body["ok"] is False
        assert "429" in body["error"]
