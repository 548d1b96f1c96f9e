import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Import models so every table is registered with SQLAlchemy Base
from . import models  # noqa: F401
from .database import Base, engine
from .domain.analytics.router import router as analytics_router
from .domain.assistant.router import router as assistant_router
from .domain.auth.router import router as auth_router
from .domain.bookings.router import router as bookings_router
from .domain.calendar.router import router as calendar_router
from .domain.chat.router import router as chat_router
from .domain.compliance.router import router as compliance_router
from .domain.director_clients.router import router as director_clients_router
from .domain.director_invitations.router import router as director_invitations_router
from .domain.director_venues.router import router as director_venues_router
from .domain.documents.router import router as documents_router
from .domain.notifications.router import router as notifications_router
from .domain.payments.router import router as payments_router
from .domain.profiles.router import router as profiles_router
from .domain.venue_availability.router import router as venue_availability_router
from .errors import register_exception_handlers

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Farewelly API starting")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info(f"✅ {len(Base.metadata.tables)} tables ready")
    except Exception as e:
        # Concurrent uvicorn workers race on CREATE TABLE
        if "already exists" in str(e) or "duplicate key" in str(e):
            logger.info("Tables were created by another worker")
        else:
            logger.error(f"❌ Failed to create database tables: {e}")

    yield
    logger.info("Farewelly API stopped")


app = FastAPI(title="Farewelly API", version="1.0.0", lifespan=lifespan)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} failed: {e}")
        raise
    elapsed_ms = (time.perf_counter() - started) * 1000
    if elapsed_ms > 1000:
        logger.warning(f"🐌 {request.method} {request.url.path} took {elapsed_ms:.0f}ms")
    return response


# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "https://farewelly.nl,https://www.farewelly.nl,http://localhost:3000",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(auth_router)
app.include_router(profiles_router)
app.include_router(bookings_router)
app.include_router(venue_availability_router)
app.include_router(payments_router)
app.include_router(documents_router)
app.include_router(chat_router)
app.include_router(director_clients_router)
app.include_router(director_invitations_router)
app.include_router(director_venues_router)
app.include_router(calendar_router)
app.include_router(analytics_router)
app.include_router(compliance_router)
app.include_router(assistant_router)
app.include_router(notifications_router)


@app.get("/")
def root():
    return {"message": "Farewelly API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/health/redis")
async def redis_health_check():
    """Redis backs rate limiting and the worker queue; report whether it answers"""
    from .rate_limiter import get_redis_client

    try:
        client = get_redis_client()
        started = time.perf_counter()
        client.ping()
        latency_ms = round((time.perf_counter() - started) * 1000, 2)
        version = client.info().get("redis_version", "unknown")
    except Exception as e:
        logger.warning(f"⚠️ Redis health check failed: {e}")
        return {"status": "unhealthy", "redis": {"connected": False, "error": str(e)}}

    return {"status": "healthy", "redis": {"connected": True, "response_time_ms": latency_ms, "version": version}}
