"""
FastAPI application factory.

* Registers routes for vehicles, reviews and admin.
* Builds the process-wide ``VehicleRegistry`` (and its fleet cache) on
  startup and tears it down on shutdown via lifespan events.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ridehail.api.middleware import limiter
from ridehail.api.routes import admin, reviews, vehicles
from ridehail.config import settings
from ridehail.infrastructure.database import async_session_factory, engine
from ridehail.infrastructure.vehicle_cache import VehicleCache
from ridehail.services.reviews import ReviewService
from ridehail.services.vehicle_registry import VehicleRegistry

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the fleet cache for the lifetime of the process."""
    app.state.registry = VehicleRegistry(VehicleCache(), async_session_factory)
    app.state.reviews = ReviewService(async_session_factory)
    logger.info("Vehicle registry ready")
    yield
    app.state.registry.close()
    await engine.dispose()
    logger.info("Vehicle registry closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Ride Hailing API",
        description=(
            "Matches riders with the nearest available vehicles, tracks "
            "bookings and collects post-ride reviews."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Routers
    app.include_router(vehicles.router, prefix="/api/v1")
    app.include_router(reviews.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
