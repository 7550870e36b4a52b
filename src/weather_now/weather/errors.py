"""Errors raised while retrieving location and weather."""

from weather_now.weather.models import ErrorKind


class WeatherFetchError(Exception):
    """Base class for failures of a fetch step.

    The message is shown to the user as-is.
    """
    kind: ErrorKind = ErrorKind.UNKNOWN


class PermissionDeniedError(WeatherFetchError):
    """Raised when location permission is not granted."""
    kind = ErrorKind.PERMISSION_DENIED


class LocationUnavailableError(WeatherFetchError):
    """Raised when the location provider cannot produce a fix."""
    kind = ErrorKind.LOCATION_UNAVAILABLE


class NetworkFailureError(WeatherFetchError):
    """Raised for transport errors, non-2xx responses and unparseable bodies."""
    kind = ErrorKind.NETWORK_FAILURE


class InvalidTransitionError(Exception):
    """Raised when the fetch state machine is asked for an illegal transition."""
    pass
