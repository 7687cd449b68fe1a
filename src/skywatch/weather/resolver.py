"""Nearest-station resolution over the observation feed."""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from skywatch.weather.models import Coordinate
from skywatch.weather.observations import StationRecord

EARTH_RADIUS_KM = 6371.0


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves away from zero, e.g. 12.5 -> 13."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute great-circle distance in km."""
    p1 = math.radians(lat1)
    p2 = math.radians(lat2)
    dp = math.radians(lat2 - lat1)
    dl = math.radians(lon2 - lon1)
    a = math.sin(dp / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2) ** 2
    # degenerate inputs (out-of-range degrees) can push a past 1 by rounding
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, max(0.0, a))))


@dataclass(frozen=True)
class StationMatch:
    station: StationRecord
    distance_km: float

    @property
    def display_distance_km(self) -> float:
        return round_half_up(self.distance_km, 1)


def find_nearest_station(coordinate: Coordinate, stations: Iterable[StationRecord]) -> Optional[StationMatch]:
    """Pick the station closest to the coordinate.

    Stations without usable coordinates are skipped. Among equally distant
    stations the first one in feed order wins.

    Returns:
        StationMatch, or None when no station has usable coordinates
    """
    best: Optional[StationMatch] = None
    for station in stations:
        position = station.coordinates
        if position is None:
            continue
        distance = haversine_km(coordinate.lat, coordinate.lon, *position)
        if best is None or distance < best.distance_km:
            best = StationMatch(station=station, distance_km=distance)
    return best
