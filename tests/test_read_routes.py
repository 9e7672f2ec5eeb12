"""Tests for the dashboard read endpoints."""
from datetime import timedelta

import pytest

from hr_odds.api.deps import is_truthy
from hr_odds.utils.timezone import eastern_midnight_utc, eastern_today, utc_now

from conftest import seed_game, seed_player, seed_quote


@pytest.fixture
def todays_slate(db_session):
    """Two games tonight (ET), one last week, players linked through quotes."""
    tonight = eastern_midnight_utc(eastern_today()) + timedelta(hours=19)
    seed_game(db_session, "g-nyy", tonight, home="NYY", away="BOS")
    seed_game(db_session, "g-lad", tonight + timedelta(hours=3), home="LAD", away="SF")
    seed_game(db_session, "g-old", tonight - timedelta(days=7), home="NYY", away="TB")

    seed_player(db_session, "judge", team_abbr="NYY", full_name="Aaron Judge")
    seed_player(db_session, "devers", team_abbr="BOS", full_name="Rafael Devers")
    seed_player(db_session, "betts", team_abbr="LAD", full_name="Mookie Betts")

    now = utc_now()
    seed_quote(db_session, "g-nyy", "judge", captured_at=now, american_odds=250, history_samples=2)
    seed_quote(db_session, "g-nyy", "devers", captured_at=now, american_odds=410)
    seed_quote(db_session, "g-nyy", "judge", captured_at=now, bookmaker="betmgm", american_odds=240)
    seed_quote(db_session, "g-nyy", "judge", captured_at=now, bookmaker="draftkings", american_odds=260)
    seed_quote(db_session, "g-lad", "betts", captured_at=now, american_odds=330)


class TestGames:

    @pytest.mark.asyncio
    async def test_todays_games_with_participants(self, async_client, todays_slate):
        response = await async_client.get("/api/games")

        assert response.status_code == 200
        data = response.json()["data"]
        assert [g["game_id"] for g in data] == ["g-nyy", "g-lad"]
        nyy = data[0]
        assert nyy["home_team"] == "NYY"
        assert nyy["game_date"] == eastern_today().isoformat()
        assert {p["player_id"] for p in nyy["participants"]} == {"judge", "devers"}

    @pytest.mark.parametrize("flag", ["1", "true", "yes", "on", "TRUE"])
    @pytest.mark.asyncio
    async def test_include_past_returns_newest_first(self, async_client, todays_slate, flag):
        response = await async_client.get("/api/games", params={"include_past": flag})

        assert [g["game_id"] for g in response.json()["data"]] == ["g-lad", "g-nyy", "g-old"]

    @pytest.mark.asyncio
    async def test_explicit_date(self, async_client, todays_slate):
        last_week = (eastern_today() - timedelta(days=7)).isoformat()

        response = await async_client.get("/api/games", params={"date": last_week})

        assert [g["game_id"] for g in response.json()["data"]] == ["g-old"]


class TestPlayers:

    @pytest.mark.asyncio
    async def test_players_for_games_sorted_by_team_then_name(self, async_client, todays_slate):
        response = await async_client.get("/api/players", params={"game_ids": "g-nyy,g-lad"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert [(p["team_abbr"], p["full_name"]) for p in data] == [
            ("bos", "Rafael Devers"),
            ("lad", "Mookie Betts"),
            ("nyy", "Aaron Judge"),
        ]

    @pytest.mark.asyncio
    async def test_no_game_ids_is_empty(self, async_client, todays_slate):
        response = await async_client.get("/api/players")
        assert response.json() == {"ok": True, "data": []}

    @pytest.mark.asyncio
    async def test_player_odds_history_is_allowed_books_in_order(self, async_client, todays_slate):
        response = await async_client.get(
            "/api/players/judge/odds", params={"game_id": "g-nyy", "market_key": "batter_home_runs"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 3
        assert {row["bookmaker"] for row in data} == {"fanduel", "betmgm"}
        timestamps = [row["captured_at"] for row in data]
        assert timestamps == sorted(timestamps)

    @pytest.mark.asyncio
    async def test_player_odds_for_unknown_market_is_empty(self, async_client, todays_slate):
        response = await async_client.get("/api/players/judge/odds", params={"market_key": "batter_hits"})
        assert response.json()["data"] == []


class TestOddsHistory:

    @pytest.mark.asyncio
    async def test_history_for_selected_players(self, async_client, todays_slate):
        response = await async_client.get(
            "/api/odds/history",
            params=[("player_ids", "judge"), ("player_ids", "devers"), ("game_ids", "g-nyy")],
        )

        assert response.status_code == 200
        data = response.json()["data"]
        # judge: 2 fanduel + 1 betmgm + 1 draftkings, devers: 1
        assert len(data) == 5
        assert {row["player_id"] for row in data} == {"judge", "devers"}

    @pytest.mark.asyncio
    async def test_missing_ids_is_400(self, async_client):
        response = await async_client.get("/api/odds/history", params={"player_ids": "judge"})

        assert response.status_code == 400
        assert response.json()["ok"] is False

    @pytest.mark.asyncio
    async def test_books(self, async_client):
        response = await async_client.get("/api/books")

        assert response.json()["data"] == [
            {"key": "fanduel", "color": "#1E90FF"},
            {"key": "betmgm", "color": "#8B4513"},
        ]


class TestJobEndpoints:

    @pytest.mark.asyncio
    async def test_cleanup_force_flag(self, async_client, todays_slate):
        skipped = await async_client.get("/jobs/cleanup")
        forced = await async_client.get("/jobs/cleanup", params={"force": "1"})

        assert skipped.status_code == 200
        assert skipped.json()["ok"] is True
        assert forced.status_code == 200
        assert forced.json()["forced"] is True
        assert forced.json()["purged_before_local_date"] == eastern_today().isoformat()

    @pytest.mark.asyncio
    async def test_events_endpoint_error_is_500(self, async_client, provider):
        provider.respond("events", {"message": "bad key"}, status=401)

        response = await async_client.get("/jobs/events")

        assert response.status_code == 500
        assert response.json()["ok"] is False

    @pytest.mark.asyncio
    async def test_health(self, async_client):
        response = await async_client.get("/health")
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_api_health_reports_store(self, async_client):
        response = await async_client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["components"]["database"]["status"] == "connected"
        assert body["components"]["scheduler"]["status"] == "disabled"


class TestQueryFlags:

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("true", True), ("Yes", True), (" on ", True),
        ("0", False), ("no", False), ("", False), (None, False),
    ])
    def test_is_truthy(self, value, expected):
        assert is_truthy(value) is expected
