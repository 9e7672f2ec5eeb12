#!/usr/bin/env python3
"""
Initialize database tables from SQLAlchemy models.

Usage:
    python scripts/init_database.py
    python scripts/init_database.py --database-url sqlite:///hr_odds.db
"""
import argparse
import logging
import sys
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from hr_odds.core.config import settings
from hr_odds.core.database import Database
from hr_odds.core.logging import configure_logging

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create the odds tracker tables")
    parser.add_argument("--database-url", default=settings.DATABASE_URL, help="SQLAlchemy database URL")
    args = parser.parse_args(argv)

    configure_logging(level=settings.LOG_LEVEL, json_output=False)

    database = Database(args.database_url)
    try:
        logger.info("Creating database tables from SQLAlchemy models...")
        database.create_all()
        logger.info("All database tables created")
    finally:
        database.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
