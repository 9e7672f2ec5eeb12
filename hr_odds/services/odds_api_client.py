"""
The Odds API client for MLB events and player home run props.

Two endpoints are used:
- GET /sports/{sport}/events
- GET /sports/{sport}/odds?markets=player_home_run&regions=us&oddsFormat=american&dateFormat=iso

One client is built at process start and shared by every job (the app
lifespan and run_scheduler.py both own one). Quota headers from each
response are pushed into Prometheus gauges.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from hr_odds.core.exceptions import ConfigError, UpstreamError
from hr_odds.core.metrics import record_odds_api_request, update_odds_api_quota

logger = logging.getLogger(__name__)

THE_ODDS_API_BASE = "https://api.the-odds-api.com/v4"
MAX_ATTEMPTS = 3


def _header_int(headers: httpx.Headers, name: str) -> Optional[int]:
    value = headers.get(name)
    if value is None:
        return None
    try:
        return int(float(value))
    except ValueError:
        return None


class OddsApiClient:
    """
    Async client for The Odds API.

    Non-2xx responses raise ``UpstreamError`` carrying the status code.
    Transport failures (connection refused, timeouts) are retried with
    exponential backoff before they propagate.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = THE_ODDS_API_BASE,
        sport: str = "baseball_mlb",
        market: str = "player_home_run",
        regions: str = "us",
        timeout: float = 30.0,
        monthly_quota: int = 20000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_wait=None,
    ):
        """
        Args:
            api_key: The Odds API key (sent as the ``apiKey`` query parameter)
            base_url: API root, without trailing slash
            sport: Sport key used in request paths
            market: Player prop market requested from the odds endpoint
            regions: Bookmaker regions
            timeout: Per-request timeout in seconds
            monthly_quota: Plan size, used for quota percentage and warnings
            transport: Optional httpx transport (tests pass ``httpx.MockTransport``)
            retry_wait: Optional tenacity wait strategy overriding the default backoff
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.sport = sport
        self.market = market
        self.regions = regions
        self.timeout = timeout
        self.monthly_quota = monthly_quota
        self._transport = transport
        self._retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=8)
        self._client: Optional[httpx.AsyncClient] = None

        self.quota_remaining: Optional[int] = None
        self.quota_used: Optional[int] = None

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "OddsApiClient":
        return cls(
            api_key=settings.THE_ODDS_API_KEY,
            base_url=settings.ODDS_API_BASE_URL,
            sport=settings.ODDS_API_SPORT,
            market=settings.ODDS_API_MARKET,
            regions=settings.ODDS_API_REGIONS,
            timeout=settings.ODDS_API_TIMEOUT,
            monthly_quota=settings.ODDS_API_MONTHLY_QUOTA,
            **kwargs,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _track_quota(self, response: httpx.Response) -> None:
        remaining = _header_int(response.headers, "x-requests-remaining")
        used = _header_int(response.headers, "x-requests-used")
        if remaining is None and used is None:
            return

        self.quota_remaining = remaining
        self.quota_used = used
        update_odds_api_quota(remaining, used, self.monthly_quota)

        if remaining is not None and self.monthly_quota > 0:
            share = remaining / self.monthly_quota
            if share < 0.05:
                logger.error(f"Odds API quota critical: {remaining} requests remaining")
            elif share < 0.20:
                logger.warning(f"Odds API quota low: {remaining} requests remaining")

    async def _get_json(self, endpoint: str, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        GET ``path`` and return the decoded JSON list.

        Raises:
            ConfigError: No API key configured
            UpstreamError: Non-2xx response
            httpx.TransportError: Network failure after all retries
        """
        if not self.api_key:
            raise ConfigError("THE_ODDS_API_KEY is not configured")

        client = await self._get_client()
        url = f"{self.base_url}{path}"
        query = {"apiKey": self.api_key, **params}

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(MAX_ATTEMPTS),
                wait=self._retry_wait,
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    response = await client.get(url, params=query)
        except httpx.TransportError as e:
            record_odds_api_request(endpoint, "transport_error")
            logger.error(f"Odds API {endpoint} request failed after {MAX_ATTEMPTS} attempts: {e}")
            raise

        self._track_quota(response)

        if response.status_code < 200 or response.status_code >= 300:
            record_odds_api_request(endpoint, "http_error")
            body = response.text[:200]
            logger.error(
                f"Odds API {endpoint} returned {response.status_code}",
                extra={"status": response.status_code, "body": body},
            )
            raise UpstreamError(
                f"Odds API {endpoint} failed with status {response.status_code}: {body}",
                upstream_status=response.status_code,
                url=url,
            )

        record_odds_api_request(endpoint, "success")
        data = response.json()
        if not isinstance(data, list):
            raise UpstreamError(
                f"Odds API {endpoint} returned an unexpected payload",
                upstream_status=response.status_code,
                url=url,
            )
        return data

    async def fetch_events(self) -> List[Dict[str, Any]]:
        """Upcoming events: ``[{id, commence_time, home_team, away_team, ...}]``."""
        return await self._get_json("events", f"/sports/{self.sport}/events", {})

    async def fetch_player_home_run_odds(self) -> List[Dict[str, Any]]:
        """Game odds payloads with nested bookmakers -> markets -> outcomes."""
        params = {
            "markets": self.market,
            "regions": self.regions,
            "oddsFormat": "american",
            "dateFormat": "iso",
        }
        return await self._get_json("odds", f"/sports/{self.sport}/odds", params)
