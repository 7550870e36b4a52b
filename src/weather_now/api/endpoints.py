"""API endpoints for the current-weather service."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from weather_now.weather.models import (
    FetchMode, Loading, Refreshing, ScreenVariant, Theme, WeatherStateResponse
)
from weather_now.weather.presentation import build_view
from weather_now.weather.service import WeatherFetchSequence
from weather_now.weather.theme import theme

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/weather", tags=["weather"])


def get_fetch_sequence(request: Request) -> WeatherFetchSequence:
    """Dependency returning the application's fetch sequence."""
    return request.app.state.fetch_sequence


def get_screen_variant(request: Request) -> ScreenVariant:
    """Dependency returning the configured screen variant."""
    return request.app.state.screen_variant


def _state_response(sequence: WeatherFetchSequence, variant: ScreenVariant) -> WeatherStateResponse:
    state = sequence.state
    return WeatherStateResponse(state=state, view=build_view(state, variant))


@router.get("/", response_model=WeatherStateResponse)
async def get_weather(
    sequence: WeatherFetchSequence = Depends(get_fetch_sequence),
    variant: ScreenVariant = Depends(get_screen_variant)
) -> WeatherStateResponse:
    """Return the current fetch state and, when ready, the screen view.

    Does not trigger a fetch.
    """
    return _state_response(sequence, variant)


@router.post("/fetch", response_model=WeatherStateResponse)
async def fetch_weather(
    mode: FetchMode = Query(
        FetchMode.INITIAL,
        description="'initial' for a full load (also used for retry), 'refresh' for pull-to-refresh"
    ),
    sequence: WeatherFetchSequence = Depends(get_fetch_sequence),
    variant: ScreenVariant = Depends(get_screen_variant)
) -> WeatherStateResponse:
    """Run the location-and-weather sequence once.

    A failed fetch is reported in the body as a `failed` state, not as an
    HTTP error.

    Raises:
        HTTPException: 409 if a fetch is already in progress
    """
    state = await sequence.fetch(mode)

    if isinstance(state, (Loading, Refreshing)):
        raise HTTPException(status_code=409, detail="A weather fetch is already in progress")

    logger.info(f"Fetch ({mode.value}) finished with state '{state.status}'")
    return WeatherStateResponse(state=state, view=build_view(state, variant))


@router.get("/theme", response_model=Theme)
async def get_theme(
    condition: Optional[str] = Query(
        None,
        description="Condition category, e.g. 'Rain' (unknown values get the default theme)"
    )
) -> Theme:
    """Return the theme for a condition category."""
    return theme(condition)


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Health status response
    """
    return {"status": "healthy", "service": "weather-now"}


@router.get("/info")
async def get_service_info(
    sequence: WeatherFetchSequence = Depends(get_fetch_sequence),
    variant: ScreenVariant = Depends(get_screen_variant)
) -> dict:
    """Get service information.

    Returns:
        Service information including location source and screen variant
    """
    return {
        "service": "Weather Now",
        "version": "0.1.0",
        "location_provider": type(sequence.location_provider).__name__,
        "screen_variant": variant.value,
        "fetch_in_progress": sequence.is_busy,
        "data_source": "OpenWeather Current Weather API"
    }
