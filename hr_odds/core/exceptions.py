"""
Error hierarchy for the ingestion pipeline.

Job endpoints map these to HTTP responses: AuthError -> 401, everything
else -> 500 with an ``{ok: false, error}`` body.
"""
from typing import Optional


class HrOddsError(Exception):
    """Base exception for the odds tracker."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UpstreamError(HrOddsError):
    """The odds provider answered with a non-2xx status."""

    def __init__(self, message: str, upstream_status: int, url: Optional[str] = None):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.url = url


class StoreError(HrOddsError):
    """A database operation failed; carries the underlying driver message."""


class ConfigError(HrOddsError):
    """A required connection setting or secret is missing."""


class AuthError(HrOddsError):
    """Refresh token missing or wrong."""

    status_code = 401
