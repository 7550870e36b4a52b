"""Data models for the current-weather service."""

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class FetchMode(str, Enum):
    """How a fetch was triggered."""
    INITIAL = "initial"
    REFRESH = "refresh"


class ErrorKind(str, Enum):
    """Category of a failed fetch."""
    PERMISSION_DENIED = "permission_denied"
    LOCATION_UNAVAILABLE = "location_unavailable"
    NETWORK_FAILURE = "network_failure"
    UNKNOWN = "unknown"


class ScreenVariant(str, Enum):
    """Screen flavours a client can render."""
    THEMED = "themed"
    SIMPLE = "simple"


class Coordinates(BaseModel):
    """A single location fix."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")


class WeatherSnapshot(BaseModel):
    """Current conditions at one location, as parsed from the provider."""
    model_config = ConfigDict(frozen=True)

    temperature: float = Field(..., description="Temperature in Celsius")
    feels_like: float = Field(..., description="Apparent temperature in Celsius")
    humidity: int = Field(..., ge=0, le=100, description="Relative humidity in percent")
    wind_speed: float = Field(..., ge=0, description="Wind speed in m/s")
    condition_main: str = Field(..., description="Condition category, e.g. 'Rain'")
    condition_description: str = Field(..., description="Free-text condition, e.g. 'light rain'")
    city_name: str = Field(..., description="City name reported by the provider")
    country_code: str = Field(..., description="ISO country code")
    observed_at: datetime = Field(..., description="When the snapshot was fetched")


class Theme(BaseModel):
    """Visual styling derived from a condition category."""
    model_config = ConfigDict(frozen=True)

    background_color: str = Field(..., description="Background color as hex")
    accent_color: str = Field(..., description="Accent color as hex")
    emoji: str = Field(..., description="Condition emoji")


# Fetch states. `status` is the tag of the FetchState union.

class Idle(BaseModel):
    """No fetch has run yet."""
    model_config = ConfigDict(frozen=True)
    status: Literal["idle"] = "idle"


class Loading(BaseModel):
    """A full load is in flight."""
    model_config = ConfigDict(frozen=True)
    status: Literal["loading"] = "loading"


class Refreshing(BaseModel):
    """A refresh of already-shown data is in flight."""
    model_config = ConfigDict(frozen=True)
    status: Literal["refreshing"] = "refreshing"


class Ready(BaseModel):
    """Weather data is available."""
    model_config = ConfigDict(frozen=True)
    status: Literal["ready"] = "ready"
    snapshot: WeatherSnapshot
    last_updated: datetime


class Failed(BaseModel):
    """The last fetch failed."""
    model_config = ConfigDict(frozen=True)
    status: Literal["failed"] = "failed"
    reason: str = Field(..., min_length=1, description="User-visible error message")
    kind: ErrorKind = ErrorKind.UNKNOWN


FetchState = Union[Idle, Loading, Refreshing, Ready, Failed]


class WeatherView(BaseModel):
    """Display-ready values for a Ready state."""
    variant: ScreenVariant
    location_label: str = Field(..., description="City and country, e.g. 'Lima, PE'")
    emoji: str
    temperature: int = Field(..., description="Rounded temperature in Celsius")
    feels_like: int = Field(..., description="Rounded apparent temperature in Celsius")
    description: str
    humidity: int
    wind_speed: int = Field(..., description="Rounded wind speed in wind_unit")
    wind_unit: Literal["km/h", "m/s"]
    background_color: str
    accent_color: str
    updated_at: str = Field(..., description="Time of last update in HH:MM format")


class WeatherStateResponse(BaseModel):
    """API response wrapping the current fetch state."""
    state: FetchState = Field(..., discriminator="status")
    view: Optional[WeatherView] = None


# Raw OpenWeather Current Weather API payload

class OwmCondition(BaseModel):
    """Entry of the `weather` array."""
    main: str
    description: str


class OwmMain(BaseModel):
    """The `main` block."""
    temp: float
    feels_like: float
    humidity: int


class OwmWind(BaseModel):
    """The `wind` block."""
    speed: float


class OwmSys(BaseModel):
    """The `sys` block."""
    country: str = ""


class OwmCurrentResponse(BaseModel):
    """Successful response from /data/2.5/weather (only the fields used)."""
    weather: List[OwmCondition] = Field(..., min_length=1)
    main: OwmMain
    wind: OwmWind
    name: str = ""
    sys: OwmSys = Field(default_factory=OwmSys)
