"""HTTP middleware stack for the economy API."""

from fastapi import FastAPI

from tq.config import Settings
from tq.middleware.cors import setup_cors
from tq.middleware.error_handler import setup_error_handlers
from tq.middleware.logging import setup_logging
from tq.middleware.rate_limit import RateLimitMiddleware
from tq.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install logging, domain error rendering, rate limiting, request ids and CORS.

    Starlette runs the last-added middleware first. Request ids are bound
    before the rate limiter so a rejected request still logs with its id,
    and CORS wraps everything so browsers can read 429 and error bodies.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    if settings.rate_limit_requests > 0:
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_window=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
