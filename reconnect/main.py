"""
Check-in service entrypoint with engine and cache-sweep lifecycle management.
"""

import asyncio
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from reconnect.config import settings
from reconnect.features.checkins import (
    build_checkin_engine,
    checkins_router,
    start_cache_sweep_scheduler,
)
from reconnect.infrastructure.observability.logging import get_logger, setup_logging
from reconnect.routes import health

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)

_HEALTH_PATHS = {"/healthz", "/readyz"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the check-in engine and run the cache sweep for the app's lifetime."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    engine = build_checkin_engine(settings)
    app.state.checkin_engine = engine
    sweep_task = asyncio.create_task(
        start_cache_sweep_scheduler(
            engine.cache, interval_seconds=settings.IDENTITY_CACHE_SWEEP_INTERVAL_SECONDS
        )
    )

    yield

    logger.info("Application shutting down")
    sweep_task.cancel()
    try:
        await sweep_task
    except asyncio.CancelledError:
        pass
    logger.info("Cache sweep stopped")


app = FastAPI(
    title="Reconnect",
    description="Relationship check-in engine",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(checkins_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Time each request; health checks are logged at debug so they don't drown the rest."""
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - started) * 1000, 2)

    log = logger.debug if request.url.path in _HEALTH_PATHS else logger.info
    log(
        "HTTP request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=duration_ms,
    )
    return response


if __name__ == "__main__":
    import uvicorn

    # Bound to loopback: the service reads the local Messages database
    uvicorn.run(app, host="127.0.0.1", port=8000)
