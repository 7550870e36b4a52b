"""Configuration settings for the current-weather service."""

import os
from typing import Final
from dotenv import load_dotenv

load_dotenv()

# OpenWeather API configuration
OPENWEATHER_BASE_URL: str = os.getenv(
    "OPENWEATHER_BASE_URL", "https://api.openweathermap.org/data/2.5/weather"
)
UNITS: Final[str] = "metric"
HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

# Location configuration
LOCATION_PROVIDER: str = os.getenv("LOCATION_PROVIDER", "static").lower()  # static | geocoding
LOCATION_ENABLED: bool = os.getenv("LOCATION_ENABLED", "true").lower() == "true"

# Default location (Lima)
DEFAULT_LAT: float = float(os.getenv("DEFAULT_LAT", "-12.0464"))
DEFAULT_LON: float = float(os.getenv("DEFAULT_LON", "-77.0428"))
LOCATION_QUERY: str = os.getenv("LOCATION_QUERY", "Lima, Peru")
GEOCODING_USER_AGENT: str = os.getenv("GEOCODING_USER_AGENT", "weather-now/0.1")

# Presentation
SCREEN_VARIANT: str = os.getenv("SCREEN_VARIANT", "themed").lower()  # themed | simple

# Server configuration
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

# Rate limiting configuration
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
RATE_LIMIT_FETCHES_PER_MINUTE: int = int(os.getenv("RATE_LIMIT_FETCHES_PER_MINUTE", "30"))
RATE_LIMIT_REDIS_KEY_PREFIX: str = os.getenv("RATE_LIMIT_REDIS_KEY_PREFIX", "weather_now_rate_limit")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"


def get_api_key() -> str:
    """Read the OpenWeather API key from the environment.

    Called once by the app factory; the value is then passed explicitly
    to the weather client.
    """
    return os.getenv("OPENWEATHER_API_KEY", "")
