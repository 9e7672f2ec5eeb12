#!/usr/bin/env python3
"""
Run ingestion jobs from the command line.

Usage:
    python scripts/run_jobs.py events
    python scripts/run_jobs.py cleanup --force
    python scripts/run_jobs.py refresh          # all four jobs in order

Prints the JSON body each job endpoint would return; exits 1 on failure.
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from hr_odds.core.config import settings
from hr_odds.core.database import Database
from hr_odds.core.logging import configure_logging
from hr_odds.services.jobs import JOBS, run_job
from hr_odds.services.odds_api_client import OddsApiClient
from hr_odds.services.refresh_orchestrator import run_refresh


async def _run(job: str, force: bool) -> dict:
    database = Database(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    client = OddsApiClient.from_settings(settings)
    try:
        if job == "refresh":
            return await run_refresh(database, client, settings)
        options = {"force": True} if force else {}
        _, body = await run_job(job, database, client, settings, options=options)
        return body
    finally:
        await client.close()
        database.dispose()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run odds tracker ingestion jobs")
    parser.add_argument("job", choices=[*JOBS, "refresh"])
    parser.add_argument("--force", action="store_true", help="Run cleanup outside the midnight window")
    args = parser.parse_args(argv)

    configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)

    body = asyncio.run(_run(args.job, args.force))
    print(json.dumps(body, indent=2, default=str))
    return 0 if body.get("ok") else 1


if __name__ == "__main__":
    sys.exit(main())
