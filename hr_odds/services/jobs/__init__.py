"""
Ingestion jobs.

- events: provider schedule -> teams, games
- odds: provider player home run props -> players, participants, odds, odds_history
- participants: link players to today's games
- cleanup: purge rows dated before today (US-Eastern)
"""
from hr_odds.services.jobs.base import JobContext
from hr_odds.services.jobs.runner import JOB_PATHS, JOBS, run_job

__all__ = ["JobContext", "JOBS", "JOB_PATHS", "run_job"]
