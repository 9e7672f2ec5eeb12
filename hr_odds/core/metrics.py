"""
Prometheus metrics for the odds tracker.

Metrics exposed:
- Odds API request counters and quota gauges
- Ingestion job run counters and duration histograms
- Rows written per table
- Participant batch failures
- Scheduler status gauges
"""
from typing import Optional

from prometheus_client import Counter, Gauge, Histogram

# External API Metrics
odds_api_requests_total = Counter(
    "odds_api_requests_total",
    "Total Odds API requests",
    ["endpoint", "outcome"]
)

odds_api_quota_remaining = Gauge(
    "odds_api_quota_remaining",
    "Remaining Odds API requests for current billing period"
)

odds_api_quota_used = Gauge(
    "odds_api_quota_used",
    "Used Odds API requests in current billing period"
)

odds_api_quota_percentage = Gauge(
    "odds_api_quota_percentage",
    "Percentage of Odds API quota used"
)

# Job Metrics
job_runs_total = Counter(
    "job_runs_total",
    "Total ingestion job runs",
    ["job", "outcome"]
)

job_duration_seconds = Histogram(
    "job_duration_seconds",
    "Ingestion job duration in seconds",
    ["job"]
)

store_rows_written_total = Counter(
    "store_rows_written_total",
    "Rows upserted, inserted or deleted by the ingestion jobs",
    ["table", "operation"]
)

participant_batch_failures_total = Counter(
    "participant_batch_failures_total",
    "Participant upsert batches that failed and were skipped",
    ["pass_name"]
)

# Scheduler Metrics
scheduler_running = Gauge(
    "scheduler_running",
    "Whether the job scheduler is running (1=running, 0=stopped)"
)

scheduler_jobs_total = Gauge(
    "scheduler_jobs_total",
    "Total number of scheduled jobs"
)


def update_odds_api_quota(remaining: Optional[int], used: Optional[int], monthly_quota: int = 20000):
    """
    Update Odds API quota gauges.

    Args:
        remaining: Remaining requests (None if header absent)
        used: Used requests (None if header absent)
        monthly_quota: Plan size used for the percentage gauge
    """
    if remaining is not None:
        odds_api_quota_remaining.set(remaining)
    if used is not None:
        odds_api_quota_used.set(used)
        if monthly_quota > 0:
            odds_api_quota_percentage.set(used / monthly_quota * 100)


def record_odds_api_request(endpoint: str, outcome: str) -> None:
    """Count one provider request by endpoint name and outcome (success/http_error/transport_error)."""
    odds_api_requests_total.labels(endpoint=endpoint, outcome=outcome).inc()


def record_job_run(job: str, ok: bool, duration_seconds: float) -> None:
    """Record the result and duration of one job run."""
    job_runs_total.labels(job=job, outcome="success" if ok else "failure").inc()
    job_duration_seconds.labels(job=job).observe(duration_seconds)


def record_rows_written(table: str, count: int, operation: str = "upsert") -> None:
    """Count rows written to a table."""
    if count:
        store_rows_written_total.labels(table=table, operation=operation).inc(count)


def record_participant_batch_failure(pass_name: str) -> None:
    """Count one failed participant batch."""
    participant_batch_failures_total.labels(pass_name=pass_name).inc()


def update_scheduler_metrics(scheduler) -> None:
    """
    Update scheduler gauges.

    Args:
        scheduler: JobScheduler instance or None
    """
    if scheduler is not None and scheduler.running:
        scheduler_running.set(1)
        if scheduler.scheduler:
            scheduler_jobs_total.set(len(scheduler.scheduler.get_jobs()))
    else:
        scheduler_running.set(0)
        scheduler_jobs_total.set(0)
