"""Response models for the skywatch API."""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """Requested location, echoed back in every coordinate-based response."""
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., description="Latitude in decimal degrees")
    lon: float = Field(..., description="Longitude in decimal degrees")


class StationInfo(BaseModel):
    """Observation station matched to the requested coordinate."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, description="Station name as reported by the feed")
    latitude: Optional[float] = Field(None, description="Station latitude")
    longitude: Optional[float] = Field(None, description="Station longitude")
    distance_km: float = Field(..., ge=0, alias="distanceKm", description="Great-circle distance, 0.1 km precision")


class CloudObservationResponse(BaseModel):
    """Current cloud cover resolved from ground observations."""
    model_config = ConfigDict(populate_by_name=True)

    request: Coordinate
    time: Optional[str] = Field(None, description="ISO-8601 observation time")
    source: str = Field(..., description="Provider and resolution method chain")
    station: Optional[StationInfo] = Field(None, description="Nearest station, null when none is usable")
    phenomenon: Optional[str] = Field(None, description="Raw phenomenon label of the station")
    cloudiness_ball: Optional[Union[int, float]] = Field(
        None, alias="cloudinessBall", description="Raw cloudiness value on the 0-8 scale"
    )
    cloud_cover_percent: Optional[int] = Field(
        None, ge=0, le=100, alias="cloudCoverPercent", description="Resolved cloud cover"
    )
    note: Optional[str] = Field(None, description="Why the reading is missing, when it is")


class KpIndexResponse(BaseModel):
    """Latest planetary K-index reading."""
    model_config = ConfigDict(populate_by_name=True)

    last_time: Optional[str] = Field(None, alias="lastTime")
    last_kp: Optional[Union[float, str]] = Field(None, alias="lastKp")


class GeocodeResult(BaseModel):
    """Single place returned by the geocoding provider."""
    name: Optional[str] = None
    admin1: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class GeocodeResponse(BaseModel):
    """Geocoding lookup result list."""
    query: str
    results: List[GeocodeResult] = Field(default_factory=list)


class AuroraGridCell(BaseModel):
    """OVATION grid cell the request was matched to."""
    model_config = ConfigDict(populate_by_name=True)

    grid_lon: float = Field(..., alias="gridLon")
    grid_lat: float = Field(..., alias="gridLat")


class AuroraResponse(BaseModel):
    """Aurora probability at the requested coordinate."""
    model_config = ConfigDict(populate_by_name=True)

    request: Coordinate
    matched: Optional[AuroraGridCell] = None
    aurora_prob_percent: Optional[float] = Field(None, alias="auroraProbPercent")


class CurrentCloudsResponse(BaseModel):
    """Current modelled cloud cover."""
    model_config = ConfigDict(populate_by_name=True)

    request: Coordinate
    time: Optional[str] = None
    cloud_cover_percent: Optional[float] = Field(None, alias="cloudCoverPercent")


class CurrentTemperatureResponse(BaseModel):
    """Current modelled air temperature."""
    model_config = ConfigDict(populate_by_name=True)

    request: Coordinate
    time: Optional[str] = None
    temperature_c: Optional[float] = Field(None, alias="temperatureC")


class CurrentPrecipitationResponse(BaseModel):
    """Current modelled precipitation."""
    model_config = ConfigDict(populate_by_name=True)

    request: Coordinate
    time: Optional[str] = None
    precipitation_mm: Optional[float] = Field(None, alias="precipitationMm")


class HourlyCloudItem(BaseModel):
    """One hour of the cloud outlook."""
    model_config = ConfigDict(populate_by_name=True)

    time: str
    cloud_cover_percent: Optional[float] = Field(None, alias="cloudCoverPercent")
    cloud_low_percent: Optional[float] = Field(None, alias="cloudLowPercent")
    cloud_mid_percent: Optional[float] = Field(None, alias="cloudMidPercent")
    cloud_high_percent: Optional[float] = Field(None, alias="cloudHighPercent")
    temperature_c: Optional[float] = Field(None, alias="temperatureC")
    precipitation_mm: Optional[float] = Field(None, alias="precipitationMm")


class OutlookRequest(BaseModel):
    """Echo of an outlook request."""
    lat: float
    lon: float
    hours: int


class CloudsOutlookResponse(BaseModel):
    """Hourly cloud outlook starting at the current hour."""
    request: OutlookRequest
    items: List[HourlyCloudItem] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
