"""
Calendar organizer pool service entry point.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from organizer_pool.config import settings
from organizer_pool.infrastructure.observability.logging import (
    get_logger,
    log_request,
    setup_logging,
)
from organizer_pool.routes import calendar, health
from organizer_pool.services.calendar.google_client import google_calendar_service
from organizer_pool.services.redis_client import fast_redis

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    try:
        logger.info("Initializing Redis connection")
        await fast_redis.initialize()
        logger.info("All services initialized successfully", services=["redis"])
    except Exception as e:
        logger.error("Failed to initialize services", error=str(e))
        raise

    yield

    logger.info("Application shutting down")

    shutdown_errors = []

    try:
        logger.info("Closing Redis connection")
        await fast_redis.close()
    except Exception as e:
        logger.error("Error closing Redis", error=str(e))
        shutdown_errors.append(f"Redis: {e}")

    try:
        logger.info("Closing Calendar API client")
        await google_calendar_service.close()
    except Exception as e:
        logger.error("Error closing Calendar API client", error=str(e))
        shutdown_errors.append(f"Calendar: {e}")

    if shutdown_errors:
        logger.warning("Some services had shutdown errors", errors=shutdown_errors)
    else:
        logger.info("All services closed successfully")


app = FastAPI(
    title="Calendar Organizer Pool",
    description="Assigns quota-limited calendar organizers to outgoing invites",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(calendar.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
