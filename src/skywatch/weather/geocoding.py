"""Place name lookup via the Open-Meteo geocoding API."""

import logging

from skywatch.config import (
    GEOCODING_COUNTRY, GEOCODING_LANGUAGE, GEOCODING_MAX_RESULTS,
    OPEN_METEO_GEOCODING_URL
)
from skywatch.weather.client import UpstreamClient
from skywatch.weather.errors import InvalidQuery
from skywatch.weather.models import GeocodeResponse, GeocodeResult

logger = logging.getLogger(__name__)


class GeocodingClient(UpstreamClient):
    """Resolves place names to coordinates, restricted to one country."""

    provider = "Geocoding"

    def __init__(
        self,
        base_url: str = OPEN_METEO_GEOCODING_URL,
        language: str = GEOCODING_LANGUAGE,
        country: str = GEOCODING_COUNTRY,
        max_results: int = GEOCODING_MAX_RESULTS,
        **kwargs
    ):
        super().__init__(base_url, **kwargs)
        self.language = language
        self.country = country
        self.max_results = max_results

    async def search(self, name: str) -> GeocodeResponse:
        """Look up a place name.

        Args:
            name: Place name, surrounding whitespace ignored

        Returns:
            GeocodeResponse with up to ``max_results`` matches

        Raises:
            InvalidQuery: If the name is blank
            UpstreamUnavailable: If the provider request fails
        """
        name = (name or "").strip()
        if not name:
            raise InvalidQuery("Missing query parameter: ?name=...")

        logger.info(f"Geocoding '{name}' in {self.country}")
        data = await self._get_json({
            "name": name,
            "count": self.max_results,
            "language": self.language,
            "format": "json",
            "countryCode": self.country,
        })

        raw_results = data.get("results") if isinstance(data, dict) else None
        results = [
            GeocodeResult(
                name=item.get("name"),
                admin1=item.get("admin1"),
                latitude=item.get("latitude"),
                longitude=item.get("longitude"),
            )
            for item in raw_results or []
            if isinstance(item, dict)
        ]
        logger.info(f"Geocoding '{name}' returned {len(results)} results")
        return GeocodeResponse(query=name, results=results)
