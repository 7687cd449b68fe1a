"""Open-Meteo passthrough views: current values and the hourly cloud outlook."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

from skywatch.config import CLOUDS_NEXT_DEFAULT_HOURS, CLOUDS_NEXT_MAX_HOURS
from skywatch.weather.client import OpenMeteoClient
from skywatch.weather.models import (
    CloudsOutlookResponse, Coordinate, CurrentCloudsResponse,
    CurrentPrecipitationResponse, CurrentTemperatureResponse,
    HourlyCloudItem, OutlookRequest
)

logger = logging.getLogger(__name__)

OUTLOOK_VARIABLES = {
    "cloud_cover": "cloud_cover_percent",
    "cloud_cover_low": "cloud_low_percent",
    "cloud_cover_mid": "cloud_mid_percent",
    "cloud_cover_high": "cloud_high_percent",
    "temperature_2m": "temperature_c",
    "precipitation": "precipitation_mm",
}


def clamp_hours(hours: Optional[int]) -> int:
    """Outlook length limited to 1..CLOUDS_NEXT_MAX_HOURS."""
    if hours is None:
        hours = CLOUDS_NEXT_DEFAULT_HOURS
    return max(1, min(CLOUDS_NEXT_MAX_HOURS, hours))


def closest_slot_index(times: Sequence[str], now: datetime) -> int:
    """Index of the hourly slot closest to ``now``; 0 when none parse.

    Slot times are local wall-clock strings without an offset, so ``now``
    must be in the same timezone.
    """
    now = now.replace(tzinfo=None)
    best_index, best_diff = 0, None
    for index, value in enumerate(times):
        try:
            slot = datetime.fromisoformat(value)
        except (TypeError, ValueError):
            continue
        diff = abs((slot.replace(tzinfo=None) - now).total_seconds())
        if best_diff is None or diff < best_diff:
            best_index, best_diff = index, diff
    return best_index


def _value_at(series: Any, index: int) -> Optional[Any]:
    if isinstance(series, list) and index < len(series):
        return series[index]
    return None


class ForecastService:
    """Reshapes single Open-Meteo responses for the dashboard."""

    def __init__(self, client: Optional[OpenMeteoClient] = None):
        self.client = client or OpenMeteoClient()

    async def get_current_clouds(self, coordinate: Coordinate) -> CurrentCloudsResponse:
        current = await self.client.get_current(coordinate, ["cloud_cover"])
        return CurrentCloudsResponse(
            request=coordinate,
            time=current.get("time"),
            cloud_cover_percent=current.get("cloud_cover"),
        )

    async def get_current_temperature(self, coordinate: Coordinate) -> CurrentTemperatureResponse:
        current = await self.client.get_current(coordinate, ["temperature_2m"])
        return CurrentTemperatureResponse(
            request=coordinate,
            time=current.get("time"),
            temperature_c=current.get("temperature_2m"),
        )

    async def get_current_precipitation(self, coordinate: Coordinate) -> CurrentPrecipitationResponse:
        current = await self.client.get_current(coordinate, ["precipitation"])
        return CurrentPrecipitationResponse(
            request=coordinate,
            time=current.get("time"),
            precipitation_mm=current.get("precipitation"),
        )

    async def get_clouds_outlook(
        self,
        coordinate: Coordinate,
        hours: int,
        now: Optional[datetime] = None
    ) -> CloudsOutlookResponse:
        """Hourly cloud layers, temperature and precipitation from the current hour on.

        Args:
            coordinate: Location to query
            hours: Number of hourly items, already clamped
            now: Reference time, defaults to the current time in the forecast timezone

        Returns:
            CloudsOutlookResponse with at most ``hours`` items
        """
        hourly = await self.client.get_hourly(coordinate, list(OUTLOOK_VARIABLES))
        times = hourly.get("time") or []
        if now is None:
            now = datetime.now(ZoneInfo(self.client.timezone))

        start = closest_slot_index(times, now)
        items: List[HourlyCloudItem] = []
        for index in range(start, min(start + hours, len(times))):
            fields: Dict[str, Any] = {
                field_name: _value_at(hourly.get(variable), index)
                for variable, field_name in OUTLOOK_VARIABLES.items()
            }
            items.append(HourlyCloudItem(time=times[index], **fields))

        logger.info(f"Cloud outlook: {len(items)} hours from slot {start}")
        return CloudsOutlookResponse(
            request=OutlookRequest(lat=coordinate.lat, lon=coordinate.lon, hours=hours),
            items=items,
        )

    async def aclose(self):
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
