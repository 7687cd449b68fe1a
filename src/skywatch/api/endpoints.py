"""API endpoints for the skywatch service."""

import logging
import math
import re
from typing import Optional

from fastapi import APIRouter, Query

from skywatch.weather.errors import InvalidCoordinate, InvalidQuery
from skywatch.weather.forecast import ForecastService, clamp_hours
from skywatch.weather.geocoding import GeocodingClient
from skywatch.weather.models import (
    AuroraResponse, CloudObservationResponse, CloudsOutlookResponse,
    Coordinate, CurrentCloudsResponse, CurrentPrecipitationResponse,
    CurrentTemperatureResponse, ErrorResponse, GeocodeResponse,
    KpIndexResponse
)
from skywatch.weather.service import ObservationService
from skywatch.weather.space import KpIndexClient, OvationClient

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["weather"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)

COORDINATE_HINT = "Expected ?lat=<float>&lon=<float>"

# plain decimal notation only; float() alone would also take "5_9" or "nan"
DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _parse_decimal(raw: str) -> Optional[float]:
    text = raw.strip()
    if not DECIMAL_PATTERN.fullmatch(text):
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def get_observation_service() -> ObservationService:
    """Factory for the per-request observation service."""
    return ObservationService()


def get_forecast_service() -> ForecastService:
    """Factory for the per-request forecast service."""
    return ForecastService()


def get_geocoding_client() -> GeocodingClient:
    return GeocodingClient()


def get_kp_client() -> KpIndexClient:
    return KpIndexClient()


def get_ovation_client() -> OvationClient:
    return OvationClient()


def parse_coordinate(lat: Optional[str], lon: Optional[str]) -> Coordinate:
    """Parse latitude and longitude query values.

    Args:
        lat: Raw latitude query value
        lon: Raw longitude query value

    Returns:
        Coordinate built from the two values

    Raises:
        InvalidCoordinate: If either value is missing, non-numeric or not finite
    """
    values = []
    for name, raw in (("lat", lat), ("lon", lon)):
        if raw is None or not raw.strip():
            raise InvalidCoordinate(f"Missing {name}. {COORDINATE_HINT}")
        value = _parse_decimal(raw)
        if value is None:
            raise InvalidCoordinate(f"Invalid {name} '{raw}'. {COORDINATE_HINT}")
        values.append(value)
    return Coordinate(lat=values[0], lon=values[1])


def parse_hours(hours: Optional[str]) -> int:
    """Parse and clamp the outlook length.

    Raises:
        InvalidQuery: If hours is given but is not a number
    """
    if hours is None or not hours.strip():
        return clamp_hours(None)
    value = _parse_decimal(hours)
    if value is None:
        raise InvalidQuery(f"Invalid hours '{hours}'. Expected an integer between 1 and 48")
    return clamp_hours(int(value))


@router.get("/clouds_obs", response_model=CloudObservationResponse)
async def get_observed_clouds(
    lat: Optional[str] = Query(None, description="Latitude in decimal degrees"),
    lon: Optional[str] = Query(None, description="Longitude in decimal degrees")
) -> CloudObservationResponse:
    """Current cloud cover from the nearest ground observation station.

    Falls back to the forecast provider when the station reports nothing
    usable about cloud cover.

    Raises:
        InvalidCoordinate: If lat/lon are invalid (400)
        UpstreamUnavailable: If the observation feed is unreachable (500)
        FeedParseError: If the observation feed is unrecognizable (500)
    """
    coordinate = parse_coordinate(lat, lon)

    observation_service = get_observation_service()
    async with observation_service:
        observation = await observation_service.get_cloud_observation(coordinate)

    logger.info(f"Observed cloud cover {observation.cloud_cover_percent} via {observation.source}")
    return observation


@router.get("/clouds", response_model=CurrentCloudsResponse)
async def get_current_clouds(
    lat: Optional[str] = Query(None, description="Latitude in decimal degrees"),
    lon: Optional[str] = Query(None, description="Longitude in decimal degrees")
) -> CurrentCloudsResponse:
    """Current modelled cloud cover."""
    coordinate = parse_coordinate(lat, lon)
    async with get_forecast_service() as forecast_service:
        return await forecast_service.get_current_clouds(coordinate)


@router.get("/clouds_next", response_model=CloudsOutlookResponse)
async def get_clouds_outlook(
    lat: Optional[str] = Query(None, description="Latitude in decimal degrees"),
    lon: Optional[str] = Query(None, description="Longitude in decimal degrees"),
    hours: Optional[str] = Query(None, description="Hours ahead, 1-48 (default 12)")
) -> CloudsOutlookResponse:
    """Hourly cloud outlook from the current hour on."""
    coordinate = parse_coordinate(lat, lon)
    window = parse_hours(hours)
    async with get_forecast_service() as forecast_service:
        return await forecast_service.get_clouds_outlook(coordinate, window)


@router.get("/temp", response_model=CurrentTemperatureResponse)
async def get_current_temperature(
    lat: Optional[str] = Query(None, description="Latitude in decimal degrees"),
    lon: Optional[str] = Query(None, description="Longitude in decimal degrees")
) -> CurrentTemperatureResponse:
    """Current modelled air temperature."""
    coordinate = parse_coordinate(lat, lon)
    async with get_forecast_service() as forecast_service:
        return await forecast_service.get_current_temperature(coordinate)


@router.get("/precip", response_model=CurrentPrecipitationResponse)
async def get_current_precipitation(
    lat: Optional[str] = Query(None, description="Latitude in decimal degrees"),
    lon: Optional[str] = Query(None, description="Longitude in decimal degrees")
) -> CurrentPrecipitationResponse:
    """Current modelled precipitation."""
    coordinate = parse_coordinate(lat, lon)
    async with get_forecast_service() as forecast_service:
        return await forecast_service.get_current_precipitation(coordinate)


@router.get("/aurora", response_model=AuroraResponse)
async def get_aurora(
    lat: Optional[str] = Query(None, description="Latitude in decimal degrees"),
    lon: Optional[str] = Query(None, description="Longitude in decimal degrees")
) -> AuroraResponse:
    """Aurora probability of the OVATION grid cell covering the coordinate."""
    coordinate = parse_coordinate(lat, lon)
    async with get_ovation_client() as ovation_client:
        return await ovation_client.get_aurora_probability(coordinate)


@router.get("/kp", response_model=KpIndexResponse)
async def get_kp() -> KpIndexResponse:
    """Latest planetary K-index."""
    async with get_kp_client() as kp_client:
        return await kp_client.get_latest_kp()


@router.get("/geocode", response_model=GeocodeResponse)
async def geocode(
    name: Optional[str] = Query(None, description="Place name to look up")
) -> GeocodeResponse:
    """Place name to coordinates."""
    if name is None or not name.strip():
        raise InvalidQuery("Missing query parameter: ?name=...")
    async with get_geocoding_client() as geocoding_client:
        return await geocoding_client.search(name)


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Health status response
    """
    return {"status": "healthy", "service": "skywatch"}
