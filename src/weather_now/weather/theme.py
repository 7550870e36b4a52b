"""Condition-to-presentation mapping and unit conversion.

Both lookups are ordered rule tables evaluated first-match-wins, so the
position of a rule is its priority.
"""

import math
from typing import Optional, Sequence, Tuple

from weather_now.weather.models import Theme

CLEAR_THEME = Theme(background_color="#FF8C42", accent_color="#FFD166", emoji="☀️")
CLOUD_THEME = Theme(background_color="#6B7FA3", accent_color="#A8BCDC", emoji="☁️")
RAIN_THEME = Theme(background_color="#3A6B8A", accent_color="#74B3D4", emoji="🌧️")
SNOW_THEME = Theme(background_color="#8FB4CC", accent_color="#D6EAF8", emoji="❄️")
STORM_THEME = Theme(background_color="#2C3E50", accent_color="#8E44AD", emoji="⛈️")
MIST_THEME = Theme(background_color="#7F8C8D", accent_color="#BDC3C7", emoji="🌫️")
DEFAULT_THEME = Theme(background_color="#3B7DD8", accent_color="#74B3D4", emoji="🌤️")

THEME_RULES: Sequence[Tuple[Tuple[str, ...], Theme]] = (
    (("clear",), CLEAR_THEME),
    (("cloud",), CLOUD_THEME),
    (("rain", "drizzle"), RAIN_THEME),
    (("snow",), SNOW_THEME),
    (("thunder", "storm"), STORM_THEME),
    (("mist", "fog", "haze"), MIST_THEME),
)

DESCRIPTION_EMOJI_RULES: Sequence[Tuple[Tuple[str, ...], str]] = (
    (("clear", "sunny"), CLEAR_THEME.emoji),
    (("cloud",), CLOUD_THEME.emoji),
    (("rain",), RAIN_THEME.emoji),
    (("snow",), SNOW_THEME.emoji),
    (("storm", "thunder"), STORM_THEME.emoji),
    (("mist", "fog"), MIST_THEME.emoji),
)
DEFAULT_EMOJI = DEFAULT_THEME.emoji


def _first_match(text: Optional[str], rules, default):
    lowered = (text or "").lower()
    for keywords, result in rules:
        if any(keyword in lowered for keyword in keywords):
            return result
    return default


def theme(condition_main: Optional[str]) -> Theme:
    """Return the theme for a condition category such as "Rain".

    Unknown or empty conditions get the partly-cloudy default.
    """
    return _first_match(condition_main, THEME_RULES, DEFAULT_THEME)


def description_emoji(description: Optional[str]) -> str:
    """Return the emoji for a free-text description such as "light rain"."""
    return _first_match(description, DESCRIPTION_EMOJI_RULES, DEFAULT_EMOJI)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def to_kmh(speed_ms: float) -> int:
    """Convert m/s to rounded km/h."""
    return round_half_up(speed_ms * 3.6)


def to_rounded_ms(speed_ms: float) -> int:
    return round_half_up(speed_ms)
