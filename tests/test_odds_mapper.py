"""Unit tests for team, price and bookmaker normalization."""
import math

import pytest

from hr_odds.services.odds_mapper import (
    TEAM_NAME_TO_ABBREV,
    allowed_book,
    american_to_decimal,
    canonical_book,
    is_valid_american,
    normalize_team_abbr,
)


class TestAmericanToDecimal:

    @pytest.mark.parametrize("american", [100, 150, 250, 1200])
    def test_positive_odds(self, american):
        assert american_to_decimal(american) == pytest.approx(1 + american / 100)

    @pytest.mark.parametrize("american", [-100, -120, -350])
    def test_negative_odds(self, american):
        assert american_to_decimal(american) == pytest.approx(1 + 100 / abs(american))

    def test_known_values(self):
        assert american_to_decimal(150) == pytest.approx(2.5)
        assert american_to_decimal(-200) == pytest.approx(1.5)


class TestNormalizeTeamAbbr:

    def test_full_name_maps_to_abbreviation(self):
        assert normalize_team_abbr("New York Yankees") == "NYY"
        assert normalize_team_abbr("  St. Louis Cardinals ") == "STL"

    def test_unknown_input_is_upper_cased(self):
        assert normalize_team_abbr("nyy") == "NYY"
        assert normalize_team_abbr("Springfield Isotopes") == "SPRINGFIELD ISOTOPES"

    def test_idempotent_for_every_franchise(self):
        for name, abbr in TEAM_NAME_TO_ABBREV.items():
            once = normalize_team_abbr(name)
            assert once == abbr
            assert normalize_team_abbr(once) == once

    def test_none_is_empty(self):
        assert normalize_team_abbr(None) == ""


class TestBooks:

    @pytest.mark.parametrize("key", ["fanduel", "FanDuel", "fan_duel", "Fan-Duel"])
    def test_fanduel_spellings(self, key):
        assert canonical_book(key) == "fanduel"

    @pytest.mark.parametrize("key", ["betmgm", "BetMGM", "bet_mgm", "mgm"])
    def test_betmgm_spellings(self, key):
        assert canonical_book(key) == "betmgm"

    def test_allowed_book_filters(self):
        allowed = ["fanduel", "betmgm"]
        assert allowed_book("MGM", allowed) == "betmgm"
        assert allowed_book("draftkings", allowed) is None
        assert allowed_book(None, allowed) is None


class TestIsValidAmerican:

    @pytest.mark.parametrize("value", [250, -110, "410", 1.5])
    def test_valid(self, value):
        assert is_valid_american(value)

    @pytest.mark.parametrize("value", [0, None, "abc", math.inf, math.nan])
    def test_invalid(self, value):
        assert not is_valid_american(value)
