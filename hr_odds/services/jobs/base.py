"""Shared context handed to every ingestion job."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from hr_odds.utils.timezone import utc_now


@dataclass
class JobContext:
    """
    Everything a job needs for one run.

    Attributes:
        db: Session owned by the runner (committed by the job, rolled back
            and closed by the runner)
        client: Shared OddsApiClient (unused by store-only jobs)
        settings: Application settings
        options: Per-run flags such as ``force`` for cleanup
        now: Reference time; defaults to the current UTC time
    """
    db: Session
    client: Any
    settings: Any
    options: Dict[str, Any] = field(default_factory=dict)
    now: Optional[datetime] = None

    def current_time(self) -> datetime:
        return self.now or utc_now()
