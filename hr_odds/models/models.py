"""
Database models for the MLB home run odds tracker.

Tables and their uniqueness constraints mirror the store the ingestion jobs
rely on for idempotent upserts:

- teams(abbr)
- games(game_id)
- players(player_id)
- game_participants(game_id, player_id)
- odds(market_key, player_id, game_id, bookmaker)   latest quote
- odds_history                                       append-only samples
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Team(Base):
    """MLB team keyed by its abbreviation. Created lazily when a game references it."""
    __tablename__ = "teams"

    abbr = Column(String(10), primary_key=True)
    team_id = Column(String(10), nullable=False)

    def __repr__(self):
        return f"<Team {self.abbr}>"


class Game(Base):
    """Scheduled game keyed by the provider event id (or a derived composite)."""
    __tablename__ = "games"

    game_id = Column(String(128), primary_key=True)
    sport_key = Column(String(50), nullable=False, default="baseball_mlb")
    game_date = Column(Date, nullable=False, index=True)  # US-Eastern calendar day
    commence_time = Column(DateTime(timezone=True), nullable=False, index=True)
    home_team = Column(String(10), ForeignKey("teams.abbr"), nullable=False)
    away_team = Column(String(10), ForeignKey("teams.abbr"), nullable=False)

    participants = relationship("GameParticipant", back_populates="game")

    def __repr__(self):
        return f"<Game {self.away_team} @ {self.home_team} {self.commence_time}>"


class Player(Base):
    """Player seen in an odds outcome. ``player_id`` falls back to the display name."""
    __tablename__ = "players"

    player_id = Column(String(128), primary_key=True)
    full_name = Column(String(255), nullable=False)
    team_abbr = Column(String(10), nullable=True, index=True)

    def __repr__(self):
        return f"<Player {self.full_name} ({self.team_abbr})>"


class GameParticipant(Base):
    """
    "This player appears in this game for this team."

    ``team_abbr`` is copied at write time and never re-validated against the
    game's home/away teams.
    """
    __tablename__ = "game_participants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_id = Column(String(128), ForeignKey("games.game_id"), nullable=False)
    player_id = Column(String(128), ForeignKey("players.player_id"), nullable=False)
    team_abbr = Column(String(10), nullable=True)

    game = relationship("Game", back_populates="participants")
    player = relationship("Player")

    __table_args__ = (
        UniqueConstraint("game_id", "player_id", name="uq_game_participants_game_player"),
    )


class OddsQuote(Base):
    """Latest known quote per (market, player, game, bookmaker); overwritten every cycle."""
    __tablename__ = "odds"

    id = Column(Integer, primary_key=True, autoincrement=True)
    market_key = Column(String(64), nullable=False)
    player_id = Column(String(128), ForeignKey("players.player_id"), nullable=False)
    game_id = Column(String(128), ForeignKey("games.game_id"), nullable=False, index=True)
    bookmaker = Column(String(32), nullable=False)
    american_odds = Column(Integer, nullable=False)
    decimal_odds = Column(Float, nullable=False)
    captured_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("market_key", "player_id", "game_id", "bookmaker", name="uq_odds_market_player_game_book"),
    )


class OddsHistorySample(Base):
    """Immutable timestamped snapshot of a quote; one row per ingestion cycle."""
    __tablename__ = "odds_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    market_key = Column(String(64), nullable=False)
    player_id = Column(String(128), ForeignKey("players.player_id"), nullable=False)
    game_id = Column(String(128), ForeignKey("games.game_id"), nullable=False)
    bookmaker = Column(String(32), nullable=False)
    american_odds = Column(Integer, nullable=False)
    decimal_odds = Column(Float, nullable=False)
    captured_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_odds_history_player_game_time", "player_id", "game_id", "captured_at"),
        Index("ix_odds_history_captured_at", "captured_at"),
    )
