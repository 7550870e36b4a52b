"""Location-and-weather retrieval sequence."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, Set

from weather_now.weather.client import OpenWeatherClient
from weather_now.weather.errors import (
    InvalidTransitionError, LocationUnavailableError, PermissionDeniedError,
    WeatherFetchError
)
from weather_now.weather.location import LocationAccuracy, LocationProvider, PermissionStatus
from weather_now.weather.models import (
    ErrorKind, Failed, FetchMode, FetchState, Idle, Loading, Ready, Refreshing,
    WeatherSnapshot
)

logger = logging.getLogger(__name__)

PERMISSION_DENIED_MESSAGE = "Location permission denied. Please enable it in your device settings."
LOCATION_FALLBACK_MESSAGE = "Unable to determine your location"
UNKNOWN_ERROR_MESSAGE = "Unknown error"

# status -> statuses reachable from it
ALLOWED_TRANSITIONS: Dict[str, Set[str]] = {
    "idle": {"loading"},
    "loading": {"ready", "failed"},
    "refreshing": {"ready", "failed"},
    "ready": {"loading", "refreshing"},
    "failed": {"loading"},
}


def local_now() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


class WeatherFetchSequence:
    """Runs permission -> fix -> weather request and tracks the fetch state.

    One invocation makes exactly one location read and at most one HTTP
    request, and ends in exactly one Ready or Failed state. Nothing is
    retried automatically; the caller retries by invoking `fetch` again.
    Overlapping invocations are rejected.
    """

    def __init__(
        self,
        location_provider: LocationProvider,
        weather_client: OpenWeatherClient,
        accuracy: LocationAccuracy = LocationAccuracy.BALANCED,
        clock: Callable[[], datetime] = local_now
    ):
        """Initialize the fetch sequence.

        Args:
            location_provider: Source of the coordinate fix
            weather_client: Client for the weather provider, carrying the API key
            accuracy: Accuracy requested for the fix
            clock: Returns the timestamp recorded on a successful fetch
        """
        self.location_provider = location_provider
        self.weather_client = weather_client
        self.accuracy = accuracy
        self._clock = clock
        self._state: FetchState = Idle()
        self._lock = asyncio.Lock()

    @property
    def state(self) -> FetchState:
        """The single active fetch state."""
        return self._state

    @property
    def is_busy(self) -> bool:
        """Whether a fetch is currently in flight."""
        return self._lock.locked()

    async def fetch(self, mode: FetchMode = FetchMode.INITIAL) -> FetchState:
        """Run the sequence once.

        Args:
            mode: INITIAL shows a full load; REFRESH keeps the current data
                on screen while updating. A refresh without data on screen
                runs as a full load.

        Returns:
            The resulting Ready or Failed state, or the in-flight state if
            another fetch is already running
        """
        if self._lock.locked():
            logger.warning(f"Fetch ({mode.value}) ignored: a fetch is already in progress")
            return self._state

        async with self._lock:
            self._transition(self._in_flight_state(mode))
            logger.info(f"Starting weather fetch ({self._state.status})")

            try:
                snapshot = await self._retrieve()
            except WeatherFetchError as e:
                logger.warning(f"Weather fetch failed ({e.kind.value}): {e}")
                result: FetchState = Failed(reason=str(e) or UNKNOWN_ERROR_MESSAGE, kind=e.kind)
            except asyncio.CancelledError:
                self._transition(Failed(reason="Weather fetch was cancelled", kind=ErrorKind.UNKNOWN))
                raise
            except Exception as e:
                logger.exception(f"Unexpected error during weather fetch: {e}")
                result = Failed(reason=str(e) or UNKNOWN_ERROR_MESSAGE, kind=ErrorKind.UNKNOWN)
            else:
                result = Ready(snapshot=snapshot, last_updated=snapshot.observed_at)

            self._transition(result)
            return result

    async def _retrieve(self) -> WeatherSnapshot:
        """Permission, fix, then one weather request.

        Raises:
            PermissionDeniedError: If location access is denied
            LocationUnavailableError: If no fix could be obtained
            NetworkFailureError: If the weather request fails
        """
        status = await self.location_provider.request_permission()
        if status != PermissionStatus.GRANTED:
            raise PermissionDeniedError(PERMISSION_DENIED_MESSAGE)

        try:
            coords = await self.location_provider.get_current_position(self.accuracy)
        except LocationUnavailableError:
            raise
        except Exception as e:
            raise LocationUnavailableError(str(e) or LOCATION_FALLBACK_MESSAGE) from e

        return await self.weather_client.get_current_weather(coords, observed_at=self._clock())

    def _in_flight_state(self, mode: FetchMode) -> FetchState:
        if mode == FetchMode.REFRESH and isinstance(self._state, Ready):
            return Refreshing()
        return Loading()

    def _transition(self, new_state: FetchState) -> None:
        """Replace the current state, enforcing the transition table.

        Raises:
            InvalidTransitionError: If the move is not allowed
        """
        current = self._state.status
        if new_state.status not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransitionError(f"Cannot move from {current} to {new_state.status}")
        logger.debug(f"Fetch state {current} -> {new_state.status}")
        self._state = new_state

    async def aclose(self):
        """Close the weather client."""
        if self.weather_client:
            try:
                await self.weather_client.aclose()
            except Exception as e:
                logger.error(f"Error closing weather client: {e}")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
