"""Service resolving current cloud cover from ground observations."""

import logging
import math
from typing import Optional, Sequence, Tuple

from skywatch.config import FALLBACK_ON_NO_STATION, PRIMARY_SOURCE_LABEL
from skywatch.weather.client import ObservationFeedClient, OpenMeteoClient
from skywatch.weather.errors import FallbackUnavailable, UpstreamUnavailable
from skywatch.weather.models import CloudObservationResponse, Coordinate, StationInfo
from skywatch.weather.observations import parse_observation_feed
from skywatch.weather.reconciler import (
    DEFAULT_POLICY, METHOD_FALLBACK, CloudCoverEstimate, Strategy,
    reconcile_cloud_cover
)
from skywatch.weather.resolver import find_nearest_station, round_half_up

logger = logging.getLogger(__name__)

SOURCE_SEPARATOR = " • "
NOTE_NO_STATIONS = "No stations with usable coordinates found"
NOTE_FALLBACK_UNAVAILABLE = "No cloud information at the station and the fallback provider was unavailable"


class ObservationService:
    """Resolves cloud cover at a coordinate from the nearest observation station.

    The feed is fetched and parsed on every call. If the nearest station
    carries no usable cloud information, the forecast provider's current
    cloud cover for the requested coordinate is used instead.
    """

    def __init__(
        self,
        feed_client: Optional[ObservationFeedClient] = None,
        forecast_client: Optional[OpenMeteoClient] = None,
        policy: Sequence[Strategy] = DEFAULT_POLICY,
        fallback_on_no_station: bool = FALLBACK_ON_NO_STATION,
        source_label: str = PRIMARY_SOURCE_LABEL
    ):
        """Initialize the observation service.

        Args:
            feed_client: Observation feed client (creates default if None)
            forecast_client: Fallback forecast client (creates default if None)
            policy: Ordered cloud cover strategies
            fallback_on_no_station: Ask the fallback provider when no station is usable
            source_label: Name of the primary provider in the source chain
        """
        self.feed_client = feed_client or ObservationFeedClient()
        self.forecast_client = forecast_client or OpenMeteoClient()
        self.policy = policy
        self.fallback_on_no_station = fallback_on_no_station
        self.source_label = source_label

    async def get_cloud_observation(self, coordinate: Coordinate) -> CloudObservationResponse:
        """Resolve current cloud cover for a coordinate.

        Args:
            coordinate: Validated request coordinate

        Returns:
            CloudObservationResponse, possibly with a null cloud cover

        Raises:
            UpstreamUnavailable: If the observation feed cannot be fetched
            FeedParseError: If the observation feed is unrecognizable
        """
        document = await self.feed_client.fetch_document()
        feed = parse_observation_feed(document)
        match = find_nearest_station(coordinate, feed.stations)

        if match is None:
            logger.info(f"No usable station for lat={coordinate.lat}, lon={coordinate.lon}")
            response = CloudObservationResponse(
                request=coordinate,
                time=feed.observed_at,
                source=self.source_label,
                note=NOTE_NO_STATIONS,
            )
            if self.fallback_on_no_station:
                response = await self._apply_fallback(coordinate, response, note=NOTE_NO_STATIONS)
            return response

        station = match.station
        logger.info(f"Nearest station '{station.name}' at {match.display_distance_km} km")

        response = CloudObservationResponse(
            request=coordinate,
            time=feed.observed_at,
            source=self.source_label,
            station=StationInfo(
                name=station.name,
                latitude=station.latitude.value,
                longitude=station.longitude.value,
                distance_km=match.display_distance_km,
            ),
            phenomenon=station.phenomenon,
            cloudiness_ball=station.cloudiness.as_number(),
        )

        estimate = reconcile_cloud_cover(station, self.policy)
        if estimate is not None:
            logger.info(f"Cloud cover {estimate.percent}% from {estimate.method}")
            return response.model_copy(update={
                "source": self._source(estimate.method),
                "cloud_cover_percent": estimate.percent,
            })

        logger.info(f"Station '{station.name}' has no usable cloud information, trying fallback")
        return await self._apply_fallback(coordinate, response, note=None)

    async def _apply_fallback(
        self,
        coordinate: Coordinate,
        response: CloudObservationResponse,
        note: Optional[str]
    ) -> CloudObservationResponse:
        try:
            estimate, observed_at = await self._fetch_fallback(coordinate)
        except FallbackUnavailable as e:
            logger.warning(f"Fallback unavailable: {e}")
            return response.model_copy(update={"note": note or NOTE_FALLBACK_UNAVAILABLE})

        logger.info(f"Cloud cover {estimate.percent}% from {estimate.method}")
        return response.model_copy(update={
            "source": self._source(estimate.method),
            "time": observed_at,
            "cloud_cover_percent": estimate.percent,
            "note": note,
        })

    async def _fetch_fallback(self, coordinate: Coordinate) -> Tuple[CloudCoverEstimate, Optional[str]]:
        """Current cloud cover from the forecast provider at the requested coordinate.

        Raises:
            FallbackUnavailable: If the provider fails or returns no numeric value
        """
        try:
            current = await self.forecast_client.get_current(coordinate, ["cloud_cover"])
        except UpstreamUnavailable as e:
            raise FallbackUnavailable(str(e)) from e

        value = current.get("cloud_cover")
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise FallbackUnavailable(f"no numeric cloud_cover in fallback response: {value!r}")

        percent = int(round_half_up(min(100.0, max(0.0, float(value)))))
        observed_at = current.get("time")
        return (
            CloudCoverEstimate(percent=percent, method=METHOD_FALLBACK),
            observed_at if isinstance(observed_at, str) else None,
        )

    def _source(self, method: str) -> str:
        return f"{self.source_label}{SOURCE_SEPARATOR}{method}"

    async def aclose(self):
        """Close the upstream clients."""
        for client in (self.feed_client, self.forecast_client):
            try:
                await client.aclose()
            except Exception as e:
                logger.error(f"Error closing {client.provider} client: {e}")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
