"""
Job registry and the single entry point used by routes, the scheduler,
the refresh orchestrator and the CLI.

``run_job`` owns the session for one run and turns any failure into the
``(status, body)`` pair a job endpoint returns.
"""
import logging
import time
from typing import Any, Dict, Optional, Tuple

from hr_odds.core.database import Database
from hr_odds.core.exceptions import HrOddsError
from hr_odds.core.logging import job_logging_context
from hr_odds.core.metrics import record_job_run
from hr_odds.core.tracing import add_span_attributes, record_exception, span
from hr_odds.services.jobs.base import JobContext
from hr_odds.services.jobs.cleanup_job import run_cleanup_job
from hr_odds.services.jobs.events_job import run_events_job
from hr_odds.services.jobs.odds_job import run_odds_job
from hr_odds.services.jobs.participants_job import run_participants_job

logger = logging.getLogger(__name__)

JOBS = {
    "events": run_events_job,
    "participants": run_participants_job,
    "odds": run_odds_job,
    "cleanup": run_cleanup_job,
}

JOB_PATHS = {name: f"/jobs/{name}" for name in JOBS}


async def run_job(
    name: str,
    database: Database,
    client: Any,
    settings: Any,
    options: Optional[Dict[str, Any]] = None,
    now=None,
) -> Tuple[int, dict]:
    """
    Run one job to completion.

    Args:
        name: One of ``JOBS``
        database: Shared Database
        client: Shared OddsApiClient
        settings: Application settings
        options: Job flags (``{"force": True}`` for cleanup)
        now: Reference time override

    Returns:
        (HTTP status, response body); failures give ``{ok: False, error}``
        with the error's status code (500 unless it is an AuthError)
    """
    if name not in JOBS:
        raise KeyError(f"Unknown job: {name}")

    started = time.perf_counter()
    db = database.session()

    with job_logging_context(name), span(f"job.{name}", {"job": name}):
        logger.info(f"Job {name} started")
        try:
            body = await JOBS[name](JobContext(db, client, settings, options or {}, now))
            status = 200
        except HrOddsError as e:
            db.rollback()
            record_exception(e)
            logger.error(f"Job {name} failed: {e.message}", extra={"error_type": type(e).__name__})
            status, body = e.status_code, {"ok": False, "error": e.message}
        except Exception as e:
            db.rollback()
            record_exception(e)
            logger.exception(f"Job {name} failed unexpectedly")
            status, body = 500, {"ok": False, "error": str(e) or type(e).__name__}
        finally:
            db.close()

        elapsed = time.perf_counter() - started
        add_span_attributes(status=status)
        record_job_run(name, status == 200, elapsed)
        logger.info(f"Job {name} finished in {elapsed:.2f}s with status {status}")

    return status, body
