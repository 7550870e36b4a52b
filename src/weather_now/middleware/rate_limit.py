"""Rate limiting middleware."""

import logging
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from weather_now.config import RATE_LIMIT_ENABLED
from weather_now.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Throttle weather fetch triggers.

    Only POST triggers that can cause an upstream weather call are
    counted. Reads, theme lookups, docs, wrong methods and triggers that
    will be rejected as overlapping pass through uncounted. Returns
    HTTP 429 when the limit is exceeded.
    """

    LIMITED_PATHS = {
        "/weather/fetch",
    }

    def __init__(self, app, rate_limiter: RateLimiter, enabled: bool = RATE_LIMIT_ENABLED):
        """Initialize rate limit middleware.

        Args:
            app: FastAPI application instance
            rate_limiter: Limiter to use
            enabled: Whether limiting is active
        """
        super().__init__(app)
        self.enabled = enabled
        self.rate_limiter = rate_limiter
        logger.info(f"Rate limit enabled: {self.enabled}, limit: {self.rate_limiter.max_requests} fetches/{self.rate_limiter.window_size:.0f}s")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request through rate limiting check.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/endpoint in chain

        Returns:
            HTTP response (either rate limit error or continued response)
        """
        if not self.enabled or request.method != "POST" or request.url.path not in self.LIMITED_PATHS:
            return await call_next(request)

        # An in-flight fetch means this trigger gets a 409 without an upstream call
        sequence = getattr(request.app.state, "fetch_sequence", None)
        if sequence is not None and sequence.is_busy:
            return await call_next(request)

        is_allowed, retry_after = await self.rate_limiter.is_allowed()

        if not is_allowed:
            request_host = request.client.host if request.client else 'unknown'
            endpoint = f"{request.method} {request.url.path}"
            logger.warning(f"Rate limit exceeded for {request_host} accessing {endpoint}")

            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Too many weather refreshes. Please try again later.",
                    "retry_after": retry_after
                },
                headers={"Retry-After": str(retry_after)}
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(self.rate_limiter.max_requests)
        response.headers["X-RateLimit-Window"] = str(int(self.rate_limiter.window_size))

        return response
