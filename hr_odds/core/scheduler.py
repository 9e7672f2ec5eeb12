"""
Cron scheduler for the ingestion jobs.

Schedule (America/New_York):
- events:        minute 5 of every 6th hour
- participants:  minute 10 of every 6th hour
- odds:          every ODDS_INTERVAL_MINUTES
- cleanup:       00:01 daily (inside its own post-midnight guard)

Scheduler: APScheduler (lightweight, FastAPI-compatible). The Database and
OddsApiClient are passed in by whoever owns the process (app lifespan or
run_scheduler.py).
"""
import logging
from typing import Any, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from hr_odds.core.database import Database
from hr_odds.core.metrics import update_scheduler_metrics
from hr_odds.services.jobs.runner import run_job

logger = logging.getLogger(__name__)

SCHEDULER_TIMEZONE = "America/New_York"


class JobScheduler:
    """
    Owns one AsyncIOScheduler with the four ingestion jobs registered.

    Job failures are reported by ``run_job`` (logs + metrics); nothing a job
    raises reaches APScheduler.
    """

    def __init__(self, database: Database, client: Any, settings: Any):
        self.database = database
        self.client = client
        self.settings = settings
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.running = False

    async def start(self):
        """Start the scheduler."""
        if self.running:
            logger.warning("Scheduler already running")
            return

        logger.info("Starting job scheduler...")

        self.scheduler = AsyncIOScheduler(
            timezone=SCHEDULER_TIMEZONE,
            job_defaults={
                "coalesce": True,  # Combine missed runs into one
                "max_instances": 1,
                "misfire_grace_time": 300,
            },
        )
        self._register_jobs()

        self.scheduler.start()
        self.running = True
        update_scheduler_metrics(self)

        logger.info(f"Scheduler started with {len(self.scheduler.get_jobs())} jobs")
        self._log_scheduled_jobs()

    async def stop(self):
        """Stop the scheduler."""
        if not self.running:
            return

        logger.info("Stopping scheduler...")
        self.scheduler.shutdown(wait=False)
        self.running = False
        update_scheduler_metrics(self)
        logger.info("Scheduler stopped")

    async def run(self, name: str) -> None:
        status, body = await run_job(name, self.database, self.client, self.settings)
        if status != 200:
            logger.error(f"Scheduled {name} job failed: {body.get('error')}")

    def _register_jobs(self):
        hours = self.settings.EVENTS_CRON_HOURS

        self.scheduler.add_job(
            self.run, CronTrigger(hour=hours, minute=5, timezone=SCHEDULER_TIMEZONE),
            args=["events"], id="events", name="Fetch MLB events",
        )
        self.scheduler.add_job(
            self.run, CronTrigger(hour=hours, minute=10, timezone=SCHEDULER_TIMEZONE),
            args=["participants"], id="participants", name="Link game participants",
        )
        self.scheduler.add_job(
            self.run, IntervalTrigger(minutes=self.settings.ODDS_INTERVAL_MINUTES),
            args=["odds"], id="odds", name="Fetch home run odds",
        )
        self.scheduler.add_job(
            self.run,
            CronTrigger(hour=0, minute=self.settings.CLEANUP_START_MINUTE, timezone=SCHEDULER_TIMEZONE),
            args=["cleanup"], id="cleanup", name="Purge stale rows",
        )

    def _log_scheduled_jobs(self):
        """Log all scheduled jobs for visibility."""
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            next_run_str = next_run.strftime("%Y-%m-%d %I:%M %p ET") if next_run else "Pending"
            logger.info(f"Scheduled: {job.name} (id={job.id}, next run {next_run_str})")

    def describe(self) -> list:
        """Job id, name and next run time for health output."""
        if not self.scheduler:
            return []
        return [
            {
                "id": job.id,
                "name": job.name,
                "next_run_time": job.next_run_time.isoformat() if getattr(job, "next_run_time", None) else None,
            }
            for job in self.scheduler.get_jobs()
        ]
