"""
Repository layer for data access.

Usage:
    from hr_odds.repositories import GameRepository, PlayerRepository

    db = database.session()
    games = GameRepository(db).find_for_eastern_day()
    db.close()
"""
from hr_odds.repositories.base import BaseRepository
from hr_odds.repositories.team_repository import TeamRepository
from hr_odds.repositories.game_repository import GameRepository
from hr_odds.repositories.player_repository import PlayerRepository
from hr_odds.repositories.participant_repository import ParticipantRepository
from hr_odds.repositories.odds_repository import OddsRepository, OddsHistoryRepository

__all__ = [
    "BaseRepository",
    "TeamRepository",
    "GameRepository",
    "PlayerRepository",
    "ParticipantRepository",
    "OddsRepository",
    "OddsHistoryRepository",
]
