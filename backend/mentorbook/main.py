# backend/mentorbook/main.py
"""
FastAPI application for mentor availability and booking.

Mounts the v1 routers under /api/v1 and exposes Prometheus metrics at
/internal/metrics.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Response

from . import models  # noqa: F401  (registers tables on Base.metadata)
from .core.config import settings
from .database import Base, engine
from .errors import register_error_handlers
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import (
    availability as availability_v1,
    bookings as bookings_v1,
    scheduling as scheduling_v1,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)

API_TITLE = "Mentorbook Scheduling API"
API_VERSION = "1.0.0"


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Starting %s (%s)", API_TITLE, settings.environment)
    if settings.database_url.startswith("sqlite"):
        # Local development without migrations
        Base.metadata.create_all(bind=engine)
    yield
    logger.info("Shutting down %s", API_TITLE)


app = FastAPI(
    title=API_TITLE,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)
register_error_handlers(app)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(availability_v1.router, prefix="/availability")
api_v1.include_router(scheduling_v1.router, prefix="/scheduling")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
app.include_router(api_v1)


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "environment": settings.environment}


@app.get("/internal/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
