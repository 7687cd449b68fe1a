"""Cloud cover derivation from a station's two sky encodings.

The policy is an ordered tuple of strategies. Each strategy looks at the
station and either returns an estimate or None (inconclusive); the first
estimate wins. When every strategy is inconclusive the caller falls back to
another provider.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

from skywatch.weather.observations import StationRecord
from skywatch.weather.resolver import round_half_up

logger = logging.getLogger(__name__)

CLOUDINESS_SCALE_MAX = 8

# Sky-condition phenomena only; precipitation and fog say nothing about cloud amount
PHENOMENON_CLOUD_COVER: Dict[str, int] = {
    "Clear": 0,
    "Few clouds": 20,
    "Variable clouds": 50,
    "Cloudy with clear spells": 75,
    "Overcast": 100,
}

METHOD_CLOUDINESS_SCALE = "cloudiness-scale"
METHOD_PHENOMENON_LABEL = "phenomenon-label"
METHOD_FALLBACK = "Open-Meteo fallback"


@dataclass(frozen=True)
class CloudCoverEstimate:
    percent: int
    method: str


Strategy = Callable[[StationRecord], Optional[CloudCoverEstimate]]


def from_cloudiness_scale(station: StationRecord) -> Optional[CloudCoverEstimate]:
    """Scale a 0-8 cloudiness value to a percentage."""
    if not station.cloudiness.is_valid:
        return None
    value = station.cloudiness.value
    if not 0 <= value <= CLOUDINESS_SCALE_MAX:
        logger.debug(f"Cloudiness {value} outside 0-{CLOUDINESS_SCALE_MAX}, ignoring")
        return None
    percent = int(round_half_up(value / CLOUDINESS_SCALE_MAX * 100))
    return CloudCoverEstimate(percent=percent, method=METHOD_CLOUDINESS_SCALE)


def from_phenomenon_label(station: StationRecord) -> Optional[CloudCoverEstimate]:
    """Map a sky-condition phenomenon label to a percentage."""
    label = (station.phenomenon or "").strip()
    percent = PHENOMENON_CLOUD_COVER.get(label)
    if percent is None:
        return None
    return CloudCoverEstimate(percent=percent, method=METHOD_PHENOMENON_LABEL)


DEFAULT_POLICY: Sequence[Strategy] = (from_cloudiness_scale, from_phenomenon_label)


def reconcile_cloud_cover(
    station: StationRecord,
    policy: Sequence[Strategy] = DEFAULT_POLICY
) -> Optional[CloudCoverEstimate]:
    """Apply the strategies in order and return the first estimate, or None."""
    for strategy in policy:
        estimate = strategy(station)
        if estimate is not None:
            return estimate
    return None
