"""
Refresh endpoint protection.

When ``REFRESH_TOKEN`` is configured, callers must present it as one of:
- header ``x-refresh-token: <token>``
- header ``Authorization: Bearer <token>``
- query ``?token=<token>``

An empty ``REFRESH_TOKEN`` disables the check.
"""
import hmac
from typing import Optional

from fastapi import Depends, Request

from hr_odds.api.deps import get_settings
from hr_odds.core.exceptions import AuthError
from hr_odds.core.logging import get_logger

logger = get_logger(__name__)

REFRESH_TOKEN_HEADER = "x-refresh-token"


def extract_refresh_token(request: Request) -> Optional[str]:
    """Token from the header, bearer authorization or query string, in that order."""
    token = request.headers.get(REFRESH_TOKEN_HEADER)
    if token:
        return token

    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    return request.query_params.get("token")


def check_refresh_token(request: Request, secret: str) -> None:
    """
    Raises:
        AuthError: A secret is configured and the request does not carry it
    """
    if not secret:
        return

    token = extract_refresh_token(request)
    if not token or not hmac.compare_digest(token.encode(), secret.encode()):
        logger.warning(f"Rejected refresh from {request.client.host if request.client else 'unknown'}")
        raise AuthError("Unauthorized")


def require_refresh_token(request: Request, settings=Depends(get_settings)) -> None:
    """FastAPI dependency wrapping ``check_refresh_token`` with the app settings."""
    check_refresh_token(request, settings.REFRESH_TOKEN)
