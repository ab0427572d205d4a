"""GlobalStay FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from globalstay.api.v1.auth import router as auth_router
from globalstay.api.v1.bookings import router as bookings_router
from globalstay.api.v1.listings import router as listings_router
from globalstay.api.v1.reviews import router as reviews_router
from globalstay.config import settings
from globalstay.database import create_engine
from globalstay.exceptions import GeocodingError, GlobalStayError
from globalstay.exceptions.handlers import geocoding_error_handler, globalstay_error_handler
from globalstay.repositories import Storage
from globalstay.repositories.memory import InMemoryStorage
from globalstay.repositories.sql import SqlAlchemyStorage
from globalstay.services.geocoding import NominatimGeocoder

# Configure the root logger so all globalstay.* loggers write to stderr.
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


def build_storage() -> Storage:
    if settings.storage_backend == "memory":
        logger.warning("Using in-memory storage; data is lost on restart")
        return InMemoryStorage()
    return SqlAlchemyStorage(create_engine(settings.async_database_url, echo=settings.debug))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the storage backend and geocoder on startup, release them on shutdown."""
    app.state.storage = build_storage()
    http_client: httpx.AsyncClient | None = None
    if settings.geocoding_enabled:
        http_client = httpx.AsyncClient(timeout=settings.geocoding_timeout_seconds)
        app.state.geocoder = NominatimGeocoder(http_client, settings.geocoding_url, settings.geocoding_user_agent)
    else:
        app.state.geocoder = None
    logger.info("%s started (storage=%s)", settings.app_name, settings.storage_backend)

    yield

    if http_client is not None:
        await http_client.aclose()
    await app.state.storage.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Vacation-rental marketplace: listings, bookings, and reviews.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Handlers are matched by MRO, so the geocoding handler wins for its subclass.
app.add_exception_handler(GlobalStayError, globalstay_error_handler)
app.add_exception_handler(GeocodingError, geocoding_error_handler)

# Routers
app.include_router(auth_router)
app.include_router(listings_router)
app.include_router(bookings_router)
app.include_router(reviews_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
