"""NOAA SWPC space-weather lookups: planetary K-index and OVATION aurora grid."""

import logging
import math
from typing import Any, Optional, Sequence

from skywatch.config import NOAA_KP_URL, NOAA_OVATION_URL
from skywatch.weather.client import UpstreamClient
from skywatch.weather.models import AuroraGridCell, AuroraResponse, Coordinate, KpIndexResponse

logger = logging.getLogger(__name__)


def latest_kp(table: Any) -> KpIndexResponse:
    """Pick the newest row of the K-index product.

    The product is either a header row followed by data rows, or a list of
    row objects keyed by column name.
    """
    if not isinstance(table, list) or not table:
        return KpIndexResponse()

    if isinstance(table[0], list):
        header, rows = table[0], table[1:]
        if not rows:
            return KpIndexResponse()
        last = rows[-1]

        def column(name: str) -> Optional[Any]:
            if name not in header:
                return None
            index = header.index(name)
            return last[index] if index < len(last) else None

        return KpIndexResponse(last_time=column("time_tag"), last_kp=column("Kp"))

    last = table[-1]
    if not isinstance(last, dict):
        return KpIndexResponse()
    return KpIndexResponse(last_time=last.get("time_tag"), last_kp=last.get("Kp", last.get("kp")))


def _nearest_int(value: float) -> int:
    # halves round up: 58.5 -> 59, -58.5 -> -58
    return math.floor(value + 0.5)


def find_aurora_cell(coordinate: Coordinate, cells: Sequence[Sequence[Any]]) -> Optional[Sequence[Any]]:
    """First grid cell whose rounded (lon 0-360, lat) matches the coordinate."""
    lon_key = _nearest_int(coordinate.lon % 360) % 360
    lat_key = _nearest_int(coordinate.lat)
    for cell in cells:
        try:
            cell_lon, cell_lat = _nearest_int(float(cell[0])), _nearest_int(float(cell[1]))
        except (TypeError, ValueError, OverflowError, IndexError):
            continue
        if cell_lon == lon_key and cell_lat == lat_key:
            return cell
    return None


class KpIndexClient(UpstreamClient):
    """Client for the NOAA planetary K-index product."""

    provider = "NOAA Kp"

    def __init__(self, base_url: str = NOAA_KP_URL, **kwargs):
        super().__init__(base_url, **kwargs)

    async def get_latest_kp(self) -> KpIndexResponse:
        """Latest planetary K-index value.

        Raises:
            UpstreamUnavailable: If NOAA cannot be reached
        """
        reading = latest_kp(await self._get_json())
        logger.info(f"Latest Kp {reading.last_kp} at {reading.last_time}")
        return reading


class OvationClient(UpstreamClient):
    """Client for the NOAA OVATION aurora probability grid."""

    provider = "NOAA OVATION"

    def __init__(self, base_url: str = NOAA_OVATION_URL, **kwargs):
        super().__init__(base_url, **kwargs)

    async def get_aurora_probability(self, coordinate: Coordinate) -> AuroraResponse:
        """Aurora probability of the grid cell covering the coordinate.

        Raises:
            UpstreamUnavailable: If NOAA cannot be reached
        """
        data = await self._get_json()
        cells = data.get("coordinates") if isinstance(data, dict) else None
        cell = find_aurora_cell(coordinate, cells or [])
        if cell is None:
            logger.info(f"No OVATION cell for lat={coordinate.lat}, lon={coordinate.lon}")
            return AuroraResponse(request=coordinate)

        try:
            probability = float(cell[2])
        except (TypeError, ValueError, IndexError):
            probability = None
        return AuroraResponse(
            request=coordinate,
            matched=AuroraGridCell(grid_lon=float(cell[0]), grid_lat=float(cell[1])),
            aurora_prob_percent=probability,
        )
