"""Location providers supplying a single coordinate fix."""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from geopy.exc import GeocoderServiceError, GeocoderTimedOut, GeocoderUnavailable
from geopy.geocoders import Nominatim

from weather_now.weather.errors import LocationUnavailableError
from weather_now.weather.models import Coordinates

logger = logging.getLogger(__name__)


class PermissionStatus(str, Enum):
    """Result of a permission request."""
    GRANTED = "granted"
    DENIED = "denied"


class LocationAccuracy(int, Enum):
    """Requested fix accuracy, coarsest first."""
    LOWEST = 1
    LOW = 2
    BALANCED = 3
    HIGH = 4
    HIGHEST = 5


class LocationProvider(ABC):
    """Source of the current position, gated by a permission."""

    @abstractmethod
    async def request_permission(self) -> PermissionStatus:
        """Ask for foreground location access."""

    @abstractmethod
    async def get_current_position(
        self, accuracy: LocationAccuracy = LocationAccuracy.BALANCED
    ) -> Coordinates:
        """Return a single fix.

        Raises:
            LocationUnavailableError: If no fix can be produced
        """


class StaticLocationProvider(LocationProvider):
    """Provider returning fixed, configured coordinates."""

    def __init__(self, latitude: float, longitude: float, enabled: bool = True):
        self.coordinates = Coordinates(latitude=latitude, longitude=longitude)
        self.enabled = enabled

    async def request_permission(self) -> PermissionStatus:
        return PermissionStatus.GRANTED if self.enabled else PermissionStatus.DENIED

    async def get_current_position(
        self, accuracy: LocationAccuracy = LocationAccuracy.BALANCED
    ) -> Coordinates:
        logger.debug(f"Static fix {self.coordinates} (accuracy={accuracy.name})")
        return self.coordinates


class GeocodingLocationProvider(LocationProvider):
    """Provider resolving a configured place name with Nominatim."""

    def __init__(
        self,
        query: str,
        user_agent: str,
        enabled: bool = True,
        geolocator: Optional[Nominatim] = None
    ):
        """Initialize the geocoding provider.

        Args:
            query: Place name to resolve, e.g. "Lima, Peru"
            user_agent: User-Agent required by the Nominatim usage policy
            enabled: Whether location access is granted
            geolocator: Geocoder instance (creates Nominatim if None)
        """
        self.query = query
        self.enabled = enabled
        self.geolocator = geolocator or Nominatim(user_agent=user_agent)
        logger.info(f"GeocodingLocationProvider initialized for '{query}'")

    async def request_permission(self) -> PermissionStatus:
        return PermissionStatus.GRANTED if self.enabled else PermissionStatus.DENIED

    async def get_current_position(
        self, accuracy: LocationAccuracy = LocationAccuracy.BALANCED
    ) -> Coordinates:
        """Geocode the configured place name.

        geopy is blocking, so the lookup runs in a worker thread.

        Raises:
            LocationUnavailableError: If the place is unknown or the service fails
        """
        try:
            logger.info(f"Geocoding location: {self.query}")
            location = await asyncio.to_thread(self.geolocator.geocode, self.query)
        except (GeocoderUnavailable, GeocoderTimedOut) as e:
            logger.error(f"Geocoding service unavailable for '{self.query}': {e}")
            raise LocationUnavailableError("Location service temporarily unavailable") from e
        except GeocoderServiceError as e:
            logger.error(f"Geocoding error for '{self.query}': {e}")
            raise LocationUnavailableError(f"Failed to determine location: {e}") from e

        if not location:
            raise LocationUnavailableError(f"Location '{self.query}' not found")

        coords = Coordinates(latitude=location.latitude, longitude=location.longitude)
        logger.info(f"Resolved '{self.query}' to ({coords.latitude}, {coords.longitude})")
        return coords
