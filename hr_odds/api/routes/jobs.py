"""
Job endpoints.

Each returns the job's JSON body with 200, or ``{ok: false, error}`` with
500. ``/jobs/refresh`` runs all four jobs and always answers 200 unless the
refresh token check fails (401).
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from hr_odds.api.deps import get_odds_client, get_settings, is_truthy
from hr_odds.core.auth import require_refresh_token
from hr_odds.core.database import get_database
from hr_odds.services.jobs import run_job
from hr_odds.services.refresh_orchestrator import run_refresh

router = APIRouter(prefix="/jobs", tags=["jobs"])


async def _run(name: str, database, client, settings, **options) -> JSONResponse:
    status, body = await run_job(name, database, client, settings, options=options)
    return JSONResponse(body, status_code=status)


@router.get("/events")
async def events_job(database=Depends(get_database), client=Depends(get_odds_client), settings=Depends(get_settings)):
    """Fetch the MLB schedule and upsert teams and games."""
    return await _run("events", database, client, settings)


@router.get("/odds")
async def odds_job(database=Depends(get_database), client=Depends(get_odds_client), settings=Depends(get_settings)):
    """Fetch player home run odds and write quotes plus history samples."""
    return await _run("odds", database, client, settings)


@router.get("/participants")
async def participants_job(
    database=Depends(get_database), client=Depends(get_odds_client), settings=Depends(get_settings)
):
    """Link players to today's games by team code, then backfill from existing odds."""
    return await _run("participants", database, client, settings)


@router.get("/cleanup")
async def cleanup_job(
    force: Optional[str] = Query(None, description="1 to bypass the post-midnight window"),
    database=Depends(get_database),
    client=Depends(get_odds_client),
    settings=Depends(get_settings),
):
    """Purge rows dated before today (ET). Skipped outside 00:01 ET unless forced."""
    return await _run("cleanup", database, client, settings, force=is_truthy(force))


@router.api_route("/refresh", methods=["GET", "POST"], dependencies=[Depends(require_refresh_token)])
async def refresh(database=Depends(get_database), client=Depends(get_odds_client), settings=Depends(get_settings)):
    """Run events, participants, odds and cleanup in order and report each result."""
    return await run_refresh(database, client, settings)
