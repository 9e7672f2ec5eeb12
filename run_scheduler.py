#!/usr/bin/env python3
"""
Standalone runner for the ingestion scheduler.

Runs the four jobs on their cron schedule without the HTTP API. Use this
when the web process runs with SCHEDULER_ENABLED=false.

Usage:
    python run_scheduler.py              # Run in foreground
    python run_scheduler.py --list-jobs  # Print the schedule and exit
"""
import argparse
import asyncio
import logging
import signal
import sys

from hr_odds.core.config import settings
from hr_odds.core.database import Database
from hr_odds.core.logging import configure_logging
from hr_odds.core.scheduler import JobScheduler
from hr_odds.services.odds_api_client import OddsApiClient

logger = logging.getLogger(__name__)


class SchedulerRunner:
    """Owns the Database, client and scheduler for the process lifetime."""

    def __init__(self):
        self.database = Database(settings.DATABASE_URL, echo=settings.SQL_ECHO)
        self.client = OddsApiClient.from_settings(settings)
        self.scheduler = JobScheduler(self.database, self.client, settings)
        self._shutdown = asyncio.Event()

    async def start(self, list_only: bool = False):
        """Start the scheduler and run until shutdown."""
        await self.scheduler.start()

        if list_only:
            for job in self.scheduler.describe():
                print(f"{job['id']:<14} {job['name']:<26} next run {job['next_run_time']}")
        else:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, self._set_shutdown)

            logger.info("Scheduler is running; press Ctrl+C to stop")
            await self._shutdown.wait()

        await self.scheduler.stop()
        await self.client.close()
        self.database.dispose()
        logger.info("Scheduler runner stopped")

    def _set_shutdown(self):
        logger.info("Shutdown signal received")
        self._shutdown.set()


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the odds tracker job scheduler")
    parser.add_argument("--list-jobs", action="store_true", help="List scheduled jobs and exit")
    args = parser.parse_args()

    configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)

    try:
        asyncio.run(SchedulerRunner().start(list_only=args.list_jobs))
    except KeyboardInterrupt:
        logger.info("Received interrupt, shutting down...")
    except Exception as e:
        logger.error(f"Scheduler error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
