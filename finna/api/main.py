"""
Finna discovery API application.

Builds the FastAPI app: tracing middleware, CORS, and the channels, themes,
payments and health routers under /api/v1. Run with
`uvicorn finna.api.main:app` or `python -m finna.api.main`.

Dependencies: fastapi, uvicorn, finna.api.routers, finna.configs
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from finna.api.deps.dependencies import get_service_cache
from finna.configs import get_settings
from finna.observability.logger import configure_logging
from finna.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import (
    channels_router,
    health_router,
    payments_router,
    themes_router,
)

API_PREFIX = "/api/v1"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load configuration-backed services at startup and release their clients at shutdown."""
    cache = get_service_cache()
    # Touching the properties parses ILS, payment, theme and channel config
    # now, so a broken file fails startup instead of the first request
    cache.ils
    cache.payment_manager
    cache.theme_info
    cache.channel_config
    logger.info(f"Services ready ({get_settings().environment})")

    yield

    await cache.close()
    cache.clear()
    logger.info("Services released")


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Finna Discovery API",
        description="Library discovery backend: channels, themes and online payment of fines",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Middleware runs in reverse order of registration: correlation first,
    # so the request log lines carry the id
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    for router in (health_router, channels_router, payments_router, themes_router):
        app.include_router(router, prefix=API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("finna.api.main:app", host="0.0.0.0", port=8000)
