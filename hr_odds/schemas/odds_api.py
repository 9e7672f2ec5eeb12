"""
Tolerant schemas for The Odds API payloads.

Upstream objects are validated here once and turned into canonical records
(``GameRecord``, ``OutcomeQuote``). Nothing past this module looks at raw
provider dictionaries or guesses between alternative field names.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, List, Literal, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from hr_odds.services.odds_mapper import is_valid_american, normalize_team_abbr
from hr_odds.utils.timezone import eastern_date, ensure_utc

logger = logging.getLogger(__name__)

# Outcome names that describe the losing side of a yes/no or over/under prop
NEGATIVE_SIDES = {"no", "under"}


def _blank_to_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


@dataclass(frozen=True)
class GameRecord:
    """Canonical game parsed from a provider event or odds entry."""
    game_id: str
    id_source: Literal["provider", "derived"]
    sport_key: str
    commence_time: datetime
    home_team: str
    away_team: str

    @property
    def game_date(self) -> date:
        """US-Eastern calendar day of the first pitch."""
        return eastern_date(self.commence_time)

    def to_row(self) -> dict:
        return {
            "game_id": self.game_id,
            "sport_key": self.sport_key,
            "game_date": self.game_date,
            "commence_time": self.commence_time,
            "home_team": self.home_team,
            "away_team": self.away_team,
        }


@dataclass(frozen=True)
class OutcomeQuote:
    """One player's price from one outcome."""
    player_id: str
    full_name: str
    team_abbr: Optional[str]
    american_odds: int


class ProviderOutcome(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    point: Optional[float] = None
    player_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("player_id", "participant_id")
    )
    team: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("team", "team_abbr", "team_name")
    )

    strip_text = field_validator("name", "description", "player_id", "team", mode="before")(_blank_to_none)

    @field_validator("price", mode="before")
    @classmethod
    def _price_or_none(cls, value: Any) -> Any:
        return float(value) if is_valid_american(value) else None

    def to_quote(self) -> Optional[OutcomeQuote]:
        """
        Resolve the player and price carried by this outcome.

        The Odds API puts the player in ``description`` for player props and
        the side ("Yes"/"Over") in ``name``; older payloads put the player in
        ``name``. Returns None for unpriced outcomes, outcomes without a
        player, and the negative side of a player prop.
        """
        if self.price is None:
            return None

        if self.description:
            if self.name and self.name.lower() in NEGATIVE_SIDES:
                return None
            full_name = self.description
        else:
            full_name = self.name
        if not full_name or full_name.lower() in NEGATIVE_SIDES:
            return None

        return OutcomeQuote(
            player_id=self.player_id or full_name,
            full_name=full_name,
            team_abbr=normalize_team_abbr(self.team) if self.team else None,
            american_odds=int(round(self.price)),
        )


class ProviderMarket(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str
    outcomes: List[ProviderOutcome] = Field(default_factory=list)


class ProviderBookmaker(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str
    title: Optional[str] = None
    markets: List[ProviderMarket] = Field(default_factory=list)


class ProviderGame(BaseModel):
    """
    Event or odds entry from ``/sports/{sport}/events`` or ``/sports/{sport}/odds``.

    ``id`` is optional: when upstream omits it, ``to_record`` derives a
    deterministic id from the teams and commence time.
    """
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "event_id"))
    sport_key: str = "baseball_mlb"
    commence_time: datetime
    home_team: str
    away_team: str
    bookmakers: List[ProviderBookmaker] = Field(default_factory=list)

    strip_id = field_validator("id", mode="before")(_blank_to_none)

    @field_validator("home_team", "away_team")
    @classmethod
    def _team_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("team name must not be empty")
        return value

    def to_record(self) -> GameRecord:
        commence_time = ensure_utc(self.commence_time)
        home = normalize_team_abbr(self.home_team)
        away = normalize_team_abbr(self.away_team)

        if self.id:
            return GameRecord(self.id, "provider", self.sport_key, commence_time, home, away)

        derived_id = f"{away}@{home}:{commence_time.strftime('%Y-%m-%dT%H:%M:%SZ')}"
        return GameRecord(derived_id, "derived", self.sport_key, commence_time, home, away)


def parse_provider_games(payload: Iterable[Any]) -> Tuple[List[ProviderGame], int]:
    """
    Validate a provider list payload entry by entry.

    Returns:
        (parsed games, number of malformed entries skipped)
    """
    games: List[ProviderGame] = []
    skipped = 0
    for index, entry in enumerate(payload or []):
        try:
            games.append(ProviderGame.model_validate(entry))
        except ValidationError as e:
            skipped += 1
            logger.warning(f"Skipping malformed provider entry #{index}: {e.error_count()} validation error(s)")
    return games, skipped
