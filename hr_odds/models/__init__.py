"""SQLAlchemy models."""
from hr_odds.models.models import (
    Base,
    Team,
    Game,
    Player,
    GameParticipant,
    OddsQuote,
    OddsHistorySample,
)

__all__ = [
    "Base",
    "Team",
    "Game",
    "Player",
    "GameParticipant",
    "OddsQuote",
    "OddsHistorySample",
]
