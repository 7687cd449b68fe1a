"""Async HTTP clients for the upstream weather providers."""

import logging
from typing import Any, Dict, Iterable, Optional

import httpx

from skywatch.config import (
    FORECAST_TIMEZONE, OBSERVATIONS_URL, OPEN_METEO_FORECAST_URL,
    UPSTREAM_TIMEOUT_SECONDS, USER_AGENT
)
from skywatch.weather.errors import UpstreamUnavailable
from skywatch.weather.models import Coordinate

logger = logging.getLogger(__name__)


class UpstreamClient:
    """Base for one upstream provider: owns an httpx client and maps its failures."""

    provider = "upstream"

    def __init__(
        self,
        base_url: str,
        timeout: float = UPSTREAM_TIMEOUT_SECONDS,
        user_agent: str = USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize the client.

        Args:
            base_url: Provider endpoint
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header for upstream requests
            transport: Optional httpx transport, used to stub the provider in tests
        """
        self.base_url = base_url
        self.client = httpx.AsyncClient(
            headers={"User-Agent": user_agent},
            timeout=timeout,
            transport=transport,
            follow_redirects=True
        )

    async def _get(self, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """GET the provider endpoint, raising UpstreamUnavailable on any failure."""
        try:
            response = await self.client.get(self.base_url, params=params)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error from {self.provider}: {e.response.status_code}")
            raise UpstreamUnavailable(f"{self.provider} HTTP {e.response.status_code}") from e
        except httpx.TimeoutException as e:
            logger.error(f"Timeout calling {self.provider}: {e!r}")
            raise UpstreamUnavailable(f"{self.provider} timed out") from e
        except httpx.RequestError as e:
            logger.error(f"Request error to {self.provider}: {e!r}")
            raise UpstreamUnavailable(f"{self.provider} request failed: {e}") from e

    async def _get_json(self, params: Optional[Dict[str, Any]] = None) -> Any:
        response = await self._get(params)
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {self.provider}: {e}")
            raise UpstreamUnavailable(f"{self.provider} returned invalid JSON") from e

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()


class ObservationFeedClient(UpstreamClient):
    """Client for the national station observation XML feed."""

    provider = "Observation feed"

    def __init__(self, base_url: str = OBSERVATIONS_URL, **kwargs):
        super().__init__(base_url, **kwargs)

    async def fetch_document(self) -> bytes:
        """Fetch the raw observation document.

        Returns:
            Raw XML body of the feed

        Raises:
            UpstreamUnavailable: If the transport fails or the status is not 2xx
        """
        logger.info(f"Fetching observation feed from {self.base_url}")
        response = await self._get()
        logger.info(f"Fetched observation feed ({len(response.content)} bytes)")
        return response.content


class OpenMeteoClient(UpstreamClient):
    """Client for the Open-Meteo forecast API."""

    provider = "Open-Meteo"

    def __init__(self, base_url: str = OPEN_METEO_FORECAST_URL, timezone: str = FORECAST_TIMEZONE, **kwargs):
        super().__init__(base_url, **kwargs)
        self.timezone = timezone

    async def get_current(self, coordinate: Coordinate, variables: Iterable[str]) -> Dict[str, Any]:
        """Fetch current values for the given variables.

        Args:
            coordinate: Location to query
            variables: Open-Meteo variable names, e.g. ``cloud_cover``

        Returns:
            The ``current`` object of the response (empty if the provider omits it)

        Raises:
            UpstreamUnavailable: If the request fails
        """
        params = {
            "latitude": coordinate.lat,
            "longitude": coordinate.lon,
            "current": ",".join(variables),
            "timezone": self.timezone,
        }
        logger.info(f"Fetching current {params['current']} for lat={coordinate.lat}, lon={coordinate.lon}")
        data = await self._get_json(params)
        current = data.get("current") if isinstance(data, dict) else None
        return current if isinstance(current, dict) else {}

    async def get_hourly(
        self,
        coordinate: Coordinate,
        variables: Iterable[str],
        forecast_days: int = 2
    ) -> Dict[str, Any]:
        """Fetch the hourly forecast block for the given variables.

        Returns:
            The ``hourly`` object of the response (empty if the provider omits it)
        """
        params = {
            "latitude": coordinate.lat,
            "longitude": coordinate.lon,
            "hourly": ",".join(variables),
            "forecast_days": forecast_days,
            "timezone": self.timezone,
        }
        logger.info(f"Fetching hourly {params['hourly']} for lat={coordinate.lat}, lon={coordinate.lon}")
        data = await self._get_json(params)
        hourly = data.get("hourly") if isinstance(data, dict) else None
        return hourly if isinstance(hourly, dict) else {}
