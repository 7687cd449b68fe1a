"""Station observation records and the XML feed parser."""

import logging
import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple, Union

from skywatch.weather.errors import FeedParseError

logger = logging.getLogger(__name__)

FEED_ROOT_TAG = "observations"
STATION_TAG = "station"


class FieldState(str, Enum):
    ABSENT = "absent"
    UNPARSEABLE = "unparseable"
    VALID = "valid"


@dataclass(frozen=True)
class ParsedNumber:
    """Outcome of parsing one optional numeric feed field."""
    state: FieldState
    value: Optional[float] = None
    raw: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.state is FieldState.VALID

    def as_number(self) -> Optional[Union[int, float]]:
        """Valid value as int when integral, float otherwise, None when not valid."""
        if not self.is_valid:
            return None
        return int(self.value) if self.value.is_integer() else self.value


ABSENT = ParsedNumber(FieldState.ABSENT)


def parse_number(text: Optional[str]) -> ParsedNumber:
    """Parse feed text into a ParsedNumber.

    Missing or blank text is absent; text that is not a finite float is
    unparseable.
    """
    if text is None or not text.strip():
        return ABSENT
    raw = text.strip()
    try:
        value = float(raw)
    except ValueError:
        return ParsedNumber(FieldState.UNPARSEABLE, raw=raw)
    if not math.isfinite(value):
        return ParsedNumber(FieldState.UNPARSEABLE, raw=raw)
    return ParsedNumber(FieldState.VALID, value=value, raw=raw)


@dataclass(frozen=True)
class StationRecord:
    """One <station> entry of the observation feed."""
    name: Optional[str] = None
    latitude: ParsedNumber = ABSENT
    longitude: ParsedNumber = ABSENT
    cloudiness: ParsedNumber = ABSENT
    phenomenon: Optional[str] = None

    @property
    def coordinates(self) -> Optional[Tuple[float, float]]:
        """(lat, lon) when both are usable, otherwise None."""
        if self.latitude.is_valid and self.longitude.is_valid:
            return self.latitude.value, self.longitude.value
        return None


@dataclass(frozen=True)
class ObservationFeed:
    stations: List[StationRecord] = field(default_factory=list)
    timestamp: ParsedNumber = ABSENT

    @property
    def observed_at(self) -> Optional[str]:
        """Feed timestamp as an ISO-8601 UTC string, or None."""
        if not self.timestamp.is_valid:
            return None
        try:
            moment = datetime.fromtimestamp(self.timestamp.value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.warning(f"Feed timestamp out of range: {self.timestamp.raw}")
            return None
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _text(element: ET.Element, tag: str) -> Optional[str]:
    value = element.findtext(tag)
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_station(element: ET.Element) -> StationRecord:
    """Build a StationRecord from a <station> element; never raises on bad fields."""
    return StationRecord(
        name=_text(element, "name"),
        latitude=parse_number(element.findtext("latitude")),
        longitude=parse_number(element.findtext("longitude")),
        cloudiness=parse_number(element.findtext("cloudiness")),
        phenomenon=_text(element, "phenomenon"),
    )


def parse_observation_feed(document: Union[str, bytes]) -> ObservationFeed:
    """Decode the observation XML document.

    Every <station> child of the root is collected in document order, so a
    feed reporting a single station is read the same way as one reporting
    many.

    Args:
        document: Raw XML body

    Returns:
        ObservationFeed with all stations, usable or not

    Raises:
        FeedParseError: If the document is not decodable XML or its root is not <observations>
    """
    try:
        root = ET.fromstring(document)
    except (ET.ParseError, LookupError, ValueError) as e:
        # LookupError: the XML declaration names an unknown encoding
        logger.error(f"Observation feed is not well-formed XML: {e}")
        raise FeedParseError(f"Observation feed is not well-formed XML: {e}") from e

    if root.tag != FEED_ROOT_TAG:
        logger.error(f"Unexpected observation feed root element <{root.tag}>")
        raise FeedParseError(f"Unrecognized observation feed: root element <{root.tag}>")

    stations = [parse_station(element) for element in root.findall(STATION_TAG)]
    unusable = sum(1 for station in stations if station.coordinates is None)
    if unusable:
        logger.warning(f"{unusable} of {len(stations)} stations have no usable coordinates")

    feed = ObservationFeed(
        stations=stations,
        timestamp=parse_number(root.get("timestamp") or root.findtext("timestamp")),
    )
    logger.info(f"Parsed {len(stations)} stations, feed timestamp {feed.timestamp.raw}")
    return feed
