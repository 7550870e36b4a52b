"""Build display values for the weather screen."""

from typing import Optional

from weather_now.weather.models import FetchState, Ready, ScreenVariant, WeatherView
from weather_now.weather.theme import (
    description_emoji, round_half_up, theme, to_kmh, to_rounded_ms
)


def format_updated_at(state: Ready) -> str:
    """Format the last update time as HH:MM."""
    return state.last_updated.strftime("%H:%M")


def build_view(state: FetchState, variant: ScreenVariant = ScreenVariant.THEMED) -> Optional[WeatherView]:
    """Derive the screen model from a Ready state.

    The theme is recomputed from the snapshot on every call. The themed
    screen shows the theme emoji and wind in km/h; the simple screen picks
    its emoji from the description and shows wind in m/s.

    Args:
        state: Current fetch state
        variant: Screen flavour to build for

    Returns:
        WeatherView, or None when the state holds no data
    """
    if not isinstance(state, Ready):
        return None

    snapshot = state.snapshot
    condition_theme = theme(snapshot.condition_main)

    if variant == ScreenVariant.SIMPLE:
        emoji = description_emoji(snapshot.condition_description)
        wind_speed = to_rounded_ms(snapshot.wind_speed)
        wind_unit = "m/s"
    else:
        emoji = condition_theme.emoji
        wind_speed = to_kmh(snapshot.wind_speed)
        wind_unit = "km/h"

    location_label = ", ".join(part for part in (snapshot.city_name, snapshot.country_code) if part)

    return WeatherView(
        variant=variant,
        location_label=location_label,
        emoji=emoji,
        temperature=round_half_up(snapshot.temperature),
        feels_like=round_half_up(snapshot.feels_like),
        description=snapshot.condition_description,
        humidity=snapshot.humidity,
        wind_speed=wind_speed,
        wind_unit=wind_unit,
        background_color=condition_theme.background_color,
        accent_color=condition_theme.accent_color,
        updated_at=format_updated_at(state),
    )
