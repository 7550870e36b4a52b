from __future__ import annotations

# ruff: noqa: S101
from datetime import datetime, timezone

import pytest

from fakes import FIXED_TIME
from weather_now.weather.models import (
    Failed,
    Idle,
    Loading,
    Ready,
    Refreshing,
    ScreenVariant,
    WeatherSnapshot,
)
from weather_now.weather.presentation import build_view
from weather_now.weather.theme import CLEAR_THEME, DEFAULT_THEME, RAIN_THEME


def _ready(**overrides: object) -> Ready:
    fields: dict[str, object] = {
        "temperature": 18.4,
        "feels_like": 17.9,
        "humidity": 80,
        "wind_speed": 5.0,
        "condition_main": "Rain",
        "condition_description": "light rain",
        "city_name": "Lima",
        "country_code": "PE",
        "observed_at": FIXED_TIME,
    }
    fields.update(overrides)
    return Ready(snapshot=WeatherSnapshot(**fields), last_updated=FIXED_TIME)


def test_themed_view() -> None:
    view = build_view(_ready(), ScreenVariant.THEMED)

    assert view is not None
    assert view.variant == ScreenVariant.THEMED
    assert view.location_label == "Lima, PE"
    assert view.emoji == RAIN_THEME.emoji
    assert view.temperature == 18
    assert view.feels_like == 18
    assert view.description == "light rain"
    assert view.humidity == 80
    assert view.wind_speed == 18
    assert view.wind_unit == "km/h"
    assert view.background_color == RAIN_THEME.background_color
    assert view.accent_color == RAIN_THEME.accent_color
    assert view.updated_at == "09:41"


def test_simple_view_uses_description_emoji_and_ms() -> None:
    view = build_view(
        _ready(condition_main="Clear", condition_description="sunny", wind_speed=3.6),
        ScreenVariant.SIMPLE,
    )

    assert view is not None
    assert view.emoji == "☀️"
    assert view.wind_speed == 4
    assert view.wind_unit == "m/s"
    assert view.background_color == CLEAR_THEME.background_color


def test_theme_follows_condition_not_description() -> None:
    view = build_view(_ready(condition_main="Smoke", condition_description="light rain"))

    assert view is not None
    assert view.background_color == DEFAULT_THEME.background_color
    assert view.emoji == DEFAULT_THEME.emoji


def test_location_label_skips_missing_country() -> None:
    view = build_view(_ready(country_code=""))
    assert view is not None
    assert view.location_label == "Lima"


def test_negative_temperatures_round_half_up() -> None:
    view = build_view(_ready(temperature=-3.5, feels_like=-7.51))
    assert view is not None
    assert view.temperature == -3
    assert view.feels_like == -8


def test_updated_at_uses_last_updated_clock() -> None:
    state = _ready()
    later = Ready(snapshot=state.snapshot, last_updated=datetime(2026, 1, 2, 23, 5, tzinfo=timezone.utc))
    view = build_view(later)
    assert view is not None
    assert view.updated_at == "23:05"


@pytest.mark.parametrize(
    "state",
    [Idle(), Loading(), Refreshing(), Failed(reason="server error")],
)
def test_no_view_without_data(state: object) -> None:
    assert build_view(state) is None  # type: ignore[arg-type]
