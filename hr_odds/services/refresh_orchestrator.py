"""
Refresh orchestrator: runs every job in dependency order and reports each
result. A failing job never stops the sequence.
"""
import logging
from typing import Any, Dict, List

from hr_odds.core.database import Database
from hr_odds.services.jobs.runner import JOB_PATHS, run_job

logger = logging.getLogger(__name__)

REFRESH_SEQUENCE = ("events", "participants", "odds", "cleanup")


async def run_refresh(database: Database, client: Any, settings: Any, now=None) -> Dict[str, Any]:
    """
    Run events, participants, odds and cleanup (guarded, never forced).

    Returns:
        ``{ok, results: [{path, ok, status, body | error}]}`` where ``ok`` is
        true only when every job succeeded
    """
    results: List[Dict[str, Any]] = []

    for name in REFRESH_SEQUENCE:
        status, body = await run_job(name, database, client, settings, now=now)
        result = {"path": JOB_PATHS[name], "ok": 200 <= status < 300 and body.get("ok", False), "status": status}
        if result["ok"]:
            result["body"] = body
        else:
            result["error"] = body.get("error", "Job failed")
        results.append(result)

    ok = all(r["ok"] for r in results)
    failed = [r["path"] for r in results if not r["ok"]]
    if failed:
        logger.warning(f"Refresh finished with failures: {', '.join(failed)}")
    else:
        logger.info("Refresh finished: all jobs succeeded")

    return {"ok": ok, "results": results}
