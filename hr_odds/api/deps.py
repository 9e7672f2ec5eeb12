"""Dependencies that hand routes the objects built once in ``create_app``."""
from typing import Optional

from fastapi import Request

TRUTHY = {"1", "true", "yes", "on"}


def get_settings(request: Request):
    return request.app.state.settings


def get_odds_client(request: Request):
    return request.app.state.odds_client


def is_truthy(value: Optional[str]) -> bool:
    """Query flag parser shared by ``force`` and ``include_past``."""
    return (value or "").strip().lower() in TRUTHY


def split_ids(values) -> list:
    """Flatten repeated and comma-separated query values, keeping first-seen order."""
    ids = []
    for value in values or []:
        for part in str(value).split(","):
            part = part.strip()
            if part and part not in ids:
                ids.append(part)
    return ids
