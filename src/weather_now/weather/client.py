"""HTTP client for the OpenWeather Current Weather API."""

import logging
from datetime import datetime
from typing import Optional

import httpx
from pydantic import ValidationError

from weather_now.config import OPENWEATHER_BASE_URL, UNITS, HTTP_TIMEOUT_SECONDS
from weather_now.weather.errors import NetworkFailureError
from weather_now.weather.models import Coordinates, OwmCurrentResponse, WeatherSnapshot

logger = logging.getLogger(__name__)

FALLBACK_ERROR_MESSAGE = "Failed to fetch weather data"


class OpenWeatherClient:
    """Async client for fetching current conditions from OpenWeather."""

    def __init__(
        self,
        api_key: str,
        base_url: str = OPENWEATHER_BASE_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the weather client.

        Args:
            api_key: OpenWeather API key
            base_url: Current Weather API endpoint
            timeout: HTTP request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if not api_key:
            logger.warning("OpenWeather API key is empty; requests will be rejected by the provider")
        self.api_key = api_key
        self.base_url = base_url
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def get_current_weather(self, coords: Coordinates, observed_at: datetime) -> WeatherSnapshot:
        """Fetch current conditions for the given coordinates.

        Exactly one HTTP request is issued; there are no retries.

        Args:
            coords: Location fix to query
            observed_at: Timestamp to stamp on the snapshot

        Returns:
            Parsed weather snapshot

        Raises:
            NetworkFailureError: On transport errors, non-2xx responses
                or a body that does not match the expected format
        """
        params = {
            "lat": coords.latitude,
            "lon": coords.longitude,
            "appid": self.api_key,
            "units": UNITS,
        }

        logger.info(f"Fetching current weather for lat={coords.latitude}, lon={coords.longitude}")

        try:
            response = await self.client.get(self.base_url, params=params)
        except httpx.RequestError as e:
            logger.error(f"Request error to OpenWeather API: {e}")
            raise NetworkFailureError(str(e) or FALLBACK_ERROR_MESSAGE) from e

        logger.info(f"OpenWeather response status: {response.status_code}")

        if not response.is_success:
            raise NetworkFailureError(self._error_message(response))

        try:
            payload = OwmCurrentResponse.model_validate(response.json())
            condition = payload.weather[0]
            snapshot = WeatherSnapshot(
                temperature=payload.main.temp,
                feels_like=payload.main.feels_like,
                humidity=payload.main.humidity,
                wind_speed=payload.wind.speed,
                condition_main=condition.main,
                condition_description=condition.description,
                city_name=payload.name,
                country_code=payload.sys.country,
                observed_at=observed_at,
            )
        except (ValueError, ValidationError) as e:
            logger.error(f"Invalid OpenWeather response format: {e}")
            raise NetworkFailureError("Received invalid weather data") from e

        logger.info(f"Successfully parsed weather: {snapshot.temperature}°C, {snapshot.condition_main} in {snapshot.city_name}")
        return snapshot

    def _error_message(self, response: httpx.Response) -> str:
        """Extract the provider's message from an error response.

        Falls back to a generic message when the body is not JSON or has
        no usable `message`.
        """
        try:
            error_data = response.json()
        except ValueError:
            logger.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:200]}")
            return FALLBACK_ERROR_MESSAGE

        logger.error(f"OpenWeather API error response: HTTP {response.status_code} - {error_data}")
        message = error_data.get("message") if isinstance(error_data, dict) else None
        if isinstance(message, str) and message:
            return message
        return FALLBACK_ERROR_MESSAGE

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
