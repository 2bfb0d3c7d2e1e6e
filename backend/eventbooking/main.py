"""
Event Booking API - Main Application Entry Point

Ticketed events with PayPal checkout:
- JWT identity (register, login, resolve)
- Event catalog with filters, pagination, image upload and reverse geocoding
- Two-step checkout (create order, capture) producing paid bookings
- Structured logging with request correlation, Prometheus metrics
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from eventbooking.core.config import get_settings
from eventbooking.core.logging import setup_logging, get_logger
from eventbooking.core.metrics import metrics_endpoint
from eventbooking.api.router import api_router
from eventbooking.api.middleware import RequestLoggingMiddleware
from eventbooking.db.session import Database
from eventbooking.infrastructure.geocoding_client import GoogleGeocoder
from eventbooking.infrastructure.paypal_client import PayPalClient
from eventbooking.services.cache_service import event_cache
import eventbooking.models  # noqa: F401 - register all mappers

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    for directory in (settings.UPLOAD_DIR, settings.IMAGES_DIR):
        Path(directory).mkdir(parents=True, exist_ok=True)

    database = Database.from_settings(settings)
    if await database.ping():
        logger.info("database_ready")
    else:
        # Keep serving; requests that need the database fail individually
        logger.error("database_unavailable", message="Starting without a database connection")
    app.state.db = database

    paypal = PayPalClient(settings)
    if not paypal.configured:
        logger.warning("paypal_not_configured", message="Checkout requests will fail")
    app.state.payment_provider = paypal
    app.state.geocoder = GoogleGeocoder(settings)

    redis_client = await event_cache.client()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache")

    yield

    await app.state.payment_provider.close()
    await app.state.geocoder.close()
    await event_cache.close()
    await database.dispose()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Ticketed event booking API with PayPal checkout",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


app.include_router(api_router)

app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")
app.mount("/images", StaticFiles(directory=settings.IMAGES_DIR, check_dir=False), name="images")


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
