"""Middleware registration."""

from fastapi import FastAPI

from guild.config import Settings
from guild.middleware.cors import setup_cors
from guild.middleware.error_handler import setup_error_handlers
from guild.middleware.logging import setup_logging
from guild.middleware.rate_limit import RateLimitMiddleware
from guild.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register logging, error handlers and middleware.

    Starlette runs middleware in reverse-add order, so CORS (added last) is
    outermost and also wraps 429 responses.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
