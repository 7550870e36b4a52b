"""Main FastAPI application for the current-weather service."""

import logging
import traceback
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from weather_now.api.endpoints import router as weather_router
from weather_now.config import (
    HOST, PORT, DEBUG, DEFAULT_LAT, DEFAULT_LON, GEOCODING_USER_AGENT,
    LOCATION_ENABLED, LOCATION_PROVIDER, LOCATION_QUERY, RATE_LIMIT_ENABLED,
    SCREEN_VARIANT, get_api_key
)
from weather_now.logging_config import configure_logging
from weather_now.middleware.rate_limit import RateLimitMiddleware
from weather_now.rate_limiter import RateLimiter
from weather_now.weather.client import OpenWeatherClient
from weather_now.weather.location import (
    GeocodingLocationProvider, LocationProvider, StaticLocationProvider
)
from weather_now.weather.models import ScreenVariant
from weather_now.weather.service import WeatherFetchSequence

# Configure logging
configure_logging(debug=DEBUG)
logger = logging.getLogger(__name__)


def build_location_provider(kind: str = LOCATION_PROVIDER) -> LocationProvider:
    """Create the configured location provider.

    Args:
        kind: 'static' or 'geocoding'

    Raises:
        ValueError: If the provider kind is unknown
    """
    if kind == "static":
        return StaticLocationProvider(DEFAULT_LAT, DEFAULT_LON, enabled=LOCATION_ENABLED)
    if kind == "geocoding":
        return GeocodingLocationProvider(
            LOCATION_QUERY, user_agent=GEOCODING_USER_AGENT, enabled=LOCATION_ENABLED
        )
    raise ValueError(f"Unknown location provider: {kind}")


def build_fetch_sequence() -> WeatherFetchSequence:
    """Create the fetch sequence from configuration.

    The API key is read here, once, and handed to the client.
    """
    client = OpenWeatherClient(api_key=get_api_key())
    return WeatherFetchSequence(build_location_provider(), client)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    owns_sequence = app.state.fetch_sequence is None
    try:
        if owns_sequence:
            app.state.fetch_sequence = build_fetch_sequence()
        logger.info(
            f"Starting Weather Now service "
            f"(location provider: {type(app.state.fetch_sequence.location_provider).__name__}, "
            f"variant: {app.state.screen_variant.value})"
        )
        yield
    except Exception as e:
        logger.error(f"Startup error: {e}")
        logger.error(traceback.format_exc())
        raise
    finally:
        logger.info("Shutting down Weather Now service")
        if owns_sequence and app.state.fetch_sequence is not None:
            await app.state.fetch_sequence.aclose()
            app.state.fetch_sequence = None
        if app.state.owns_rate_limiter:
            await app.state.rate_limiter.close()


def create_app(
    fetch_sequence: Optional[WeatherFetchSequence] = None,
    rate_limiter: Optional[RateLimiter] = None,
    rate_limit_enabled: bool = RATE_LIMIT_ENABLED,
    screen_variant: str = SCREEN_VARIANT
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        fetch_sequence: Sequence to serve (built from configuration at startup if None)
        rate_limiter: Limiter for fetch triggers (Redis-backed if None)
        rate_limit_enabled: Whether fetch triggers are throttled
        screen_variant: 'themed' or 'simple'

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Weather Now",
        description="Current weather for the device location with condition-based theming, using OpenWeather",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.fetch_sequence = fetch_sequence
    app.state.screen_variant = ScreenVariant(screen_variant)
    app.state.owns_rate_limiter = rate_limiter is None
    app.state.rate_limiter = rate_limiter or RateLimiter()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add rate limiting middleware
    app.add_middleware(RateLimitMiddleware, rate_limiter=app.state.rate_limiter, enabled=rate_limit_enabled)

    # Include API routers
    app.include_router(weather_router)

    @app.get("/api", tags=["root"])
    async def api_info() -> dict:
        """API information endpoint.

        Returns:
            Basic service information
        """
        return {
            "message": "Weather Now",
            "docs": "/docs",
            "redoc": "/redoc",
            "weather": "/weather",
            "fetch": "/weather/fetch",
            "health": "/weather/health"
        }

    return app


# Create app instance for uvicorn
app = create_app()


def main() -> None:
    """Main entry point for the application."""
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        "weather_now.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
        log_level="info" if not DEBUG else "debug"
    )


if __name__ == "__main__":
    main()
