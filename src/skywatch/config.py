"""Configuration settings for the skywatch service."""

import os
from typing import Final
from dotenv import load_dotenv

load_dotenv()

# Upstream providers
OBSERVATIONS_URL: Final[str] = os.getenv(
    "OBSERVATIONS_URL", "https://www.ilmateenistus.ee/ilma_andmed/xml/observations.php"
)
PRIMARY_SOURCE_LABEL: Final[str] = os.getenv("PRIMARY_SOURCE_LABEL", "Ilmateenistus (Keskkonnaagentuur)")
OPEN_METEO_FORECAST_URL: Final[str] = os.getenv("OPEN_METEO_FORECAST_URL", "https://api.open-meteo.com/v1/forecast")
OPEN_METEO_GEOCODING_URL: Final[str] = os.getenv(
    "OPEN_METEO_GEOCODING_URL", "https://geocoding-api.open-meteo.com/v1/search"
)
NOAA_KP_URL: Final[str] = os.getenv(
    "NOAA_KP_URL", "https://services.swpc.noaa.gov/products/noaa-planetary-k-index.json"
)
NOAA_OVATION_URL: Final[str] = os.getenv(
    "NOAA_OVATION_URL", "https://services.swpc.noaa.gov/json/ovation_aurora_latest.json"
)
USER_AGENT: Final[str] = os.getenv("USER_AGENT", "skywatch/0.1 (+https://github.com/skywatch)")
UPSTREAM_TIMEOUT_SECONDS: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "10"))

# Forecast and geocoding defaults (Estonia)
FORECAST_TIMEZONE: str = os.getenv("FORECAST_TIMEZONE", "Europe/Tallinn")
GEOCODING_LANGUAGE: str = os.getenv("GEOCODING_LANGUAGE", "et")
GEOCODING_COUNTRY: str = os.getenv("GEOCODING_COUNTRY", "EE")
GEOCODING_MAX_RESULTS: int = int(os.getenv("GEOCODING_MAX_RESULTS", "10"))

# Hourly outlook window
CLOUDS_NEXT_DEFAULT_HOURS: int = 12
CLOUDS_NEXT_MAX_HOURS: int = 48

# Ask the forecast provider even when the feed has no usable station
FALLBACK_ON_NO_STATION: bool = os.getenv("FALLBACK_ON_NO_STATION", "false").lower() == "true"

# Server configuration
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "3000"))
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()
