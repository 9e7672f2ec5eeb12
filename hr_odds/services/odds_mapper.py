"""
Normalization helpers for The Odds API payloads.

- Full franchise names -> team abbreviations
- American odds -> decimal odds
- Loose bookmaker key matching against the allow-list
"""
import math
import re
from typing import Iterable, Optional

# Team name mapping: The Odds API full names -> abbreviations
TEAM_NAME_TO_ABBREV = {
    "Arizona Diamondbacks": "ARI",
    "Atlanta Braves": "ATL",
    "Baltimore Orioles": "BAL",
    "Boston Red Sox": "BOS",
    "Chicago Cubs": "CHC",
    "Chicago White Sox": "CWS",
    "Cincinnati Reds": "CIN",
    "Cleveland Guardians": "CLE",
    "Colorado Rockies": "COL",
    "Detroit Tigers": "DET",
    "Houston Astros": "HOU",
    "Kansas City Royals": "KC",
    "Los Angeles Angels": "LAA",
    "Los Angeles Dodgers": "LAD",
    "Miami Marlins": "MIA",
    "Milwaukee Brewers": "MIL",
    "Minnesota Twins": "MIN",
    "New York Mets": "NYM",
    "New York Yankees": "NYY",
    "Oakland Athletics": "OAK",
    "Philadelphia Phillies": "PHI",
    "Pittsburgh Pirates": "PIT",
    "San Diego Padres": "SD",
    "San Francisco Giants": "SF",
    "Seattle Mariners": "SEA",
    "St. Louis Cardinals": "STL",
    "Tampa Bay Rays": "TB",
    "Texas Rangers": "TEX",
    "Toronto Blue Jays": "TOR",
    "Washington Nationals": "WSH",
}

# Chart colours used by the dashboard
BOOK_COLORS = {
    "fanduel": "#1E90FF",
    "betmgm": "#8B4513",
}

# Loose spellings seen in provider keys -> canonical bookmaker key
BOOK_ALIASES = {
    "fanduel": "fanduel",
    "fd": "fanduel",
    "betmgm": "betmgm",
    "mgm": "betmgm",
}

_BOOK_SEPARATORS = re.compile(r"[\s_-]+")


def normalize_team_abbr(name_or_abbr: Optional[str]) -> str:
    """
    Convert a full franchise name to its abbreviation.

    Unknown input (including something that is already an abbreviation) is
    returned trimmed and upper-cased, so the result is always deterministic.

    Examples:
        >>> normalize_team_abbr("New York Yankees")
        'NYY'
        >>> normalize_team_abbr("nyy")
        'NYY'
    """
    trimmed = (name_or_abbr or "").strip()
    return TEAM_NAME_TO_ABBREV.get(trimmed, trimmed.upper())


def american_to_decimal(american: float) -> float:
    """
    Convert American odds to decimal odds.

    +150 -> 2.5, -120 -> 1.8333... Zero is not a valid American price;
    callers are expected to filter it out first.
    """
    if american > 0:
        return 1 + american / 100
    return 1 + 100 / abs(american)


def is_valid_american(value) -> bool:
    """True for a finite, non-zero number."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number) and number != 0


def canonical_book(key: Optional[str]) -> Optional[str]:
    """
    Map a provider bookmaker key to its canonical form.

    Case, spaces, underscores and dashes are ignored ("Bet_MGM" -> "betmgm").
    Unknown keys come back squashed and lower-cased.
    """
    if not key:
        return None
    squashed = _BOOK_SEPARATORS.sub("", key.lower())
    return BOOK_ALIASES.get(squashed, squashed)


def allowed_book(key: Optional[str], allowed: Iterable[str]) -> Optional[str]:
    """Canonical bookmaker key if it is in ``allowed``, else None."""
    book = canonical_book(key)
    if book and book in set(allowed):
        return book
    return None
