"""FastAPI application factory for the newshub web API."""

from __future__ import annotations

from fastapi import FastAPI

from newshub.cache import Cache, TTLCache
from newshub.web.config import WebConfig
from newshub.web.deps import RateLimiter
from newshub.web.routes import health_router, router


def create_app(config: WebConfig, lifespan=None, cache: Cache | None = None) -> FastAPI:
    """Build and return a configured FastAPI application.

    ``cache`` defaults to an in-process TTL cache; pass a NullCache to
    disable response caching.
    """
    app = FastAPI(title="newshub", docs_url="/api/docs", lifespan=lifespan)
    app.state.database_path = config.database_path
    app.state.cache = (
        cache if cache is not None else TTLCache(max_entries=config.cache_max_entries)
    )
    app.state.cache_ttl = config.cache_ttl_seconds
    app.state.rate_limiter = RateLimiter(config.rate_limit_per_minute)
    app.include_router(health_router)
    app.include_router(router, prefix="/api/v1")
    return app
