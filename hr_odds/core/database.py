"""
Database configuration and session management.

A single ``Database`` object is built at process start (by the FastAPI
app factory or ``run_scheduler.py``) and handed to every job and route.
Nothing here creates connections at import time.
"""
from typing import Generator, Optional

from fastapi import Depends, Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session


class Database:
    """Engine plus session factory for one database URL."""

    def __init__(self, url: Optional[str] = None, engine: Optional[Engine] = None, echo: bool = False):
        """
        Build the engine (or wrap an existing one).

        Args:
            url: SQLAlchemy database URL
            engine: Pre-built engine (tests pass an in-memory SQLite engine)
            echo: Log emitted SQL
        """
        if engine is None:
            if not url:
                raise ValueError("Database requires either a url or an engine")
            engine = self._create_engine(url, echo)

        self.engine = engine
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @staticmethod
    def _create_engine(url: str, echo: bool) -> Engine:
        if url.startswith("sqlite"):
            return create_engine(url, connect_args={"check_same_thread": False}, echo=echo)
        return create_engine(
            url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,  # Verify connections before using
            echo=echo,
        )

    def session(self) -> Session:
        """Open a new session; the caller closes it."""
        return self.session_factory()

    def create_all(self) -> None:
        """Create any missing tables."""
        from hr_odds.models.models import Base
        Base.metadata.create_all(bind=self.engine, checkfirst=True)

    def dispose(self) -> None:
        self.engine.dispose()


def get_database(request: Request) -> Database:
    """FastAPI dependency: the Database attached to the running app."""
    return request.app.state.database


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.

    Usage in FastAPI:
    ```python
    @router.get("/endpoint")
    def endpoint(db: Session = Depends(get_db)):
        ...
    ```
    """
    db = database.session()
    try:
        yield db
    finally:
        db.close()
