import logging
import os
import time

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import DATABASE_URL

logger = logging.getLogger(__name__)

# Pool sizing, ignored for SQLite
POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "30"))
POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "300"))
ENABLE_QUERY_LOGGING = os.getenv("DB_LOG_SLOW_QUERIES", "true").lower() == "true"
SLOW_QUERY_THRESHOLD = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0"))


def _engine_options(url: str) -> dict:
    """Pool options per backend; SQLite has no connection pool to size"""
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # Single shared connection so every session sees the same in-memory database
            options["poolclass"] = StaticPool
        return options

    return {
        "pool_pre_ping": True,  # Test connections before using
        "pool_recycle": POOL_RECYCLE,
        "pool_size": POOL_SIZE,
        "max_overflow": MAX_OVERFLOW,
        "pool_timeout": POOL_TIMEOUT,
    }


try:
    engine = create_engine(DATABASE_URL, echo=False, **_engine_options(DATABASE_URL))
    logger.info("✅ Database engine created successfully")
    if not DATABASE_URL.startswith("sqlite"):
        logger.info(
            f"📊 Connection pool: size={POOL_SIZE}, max_overflow={MAX_OVERFLOW}, timeout={POOL_TIMEOUT}s"
        )
except Exception as e:
    logger.error(f"❌ Failed to create database engine: {e}")
    raise


def install_slow_query_logging(target, threshold: float = SLOW_QUERY_THRESHOLD) -> None:
    """Warn about statements slower than `threshold` seconds on `target`"""

    @event.listens_for(target, "before_cursor_execute")
    def _start_timer(conn, _cursor, _statement, _parameters, _context, _executemany):
        conn.info.setdefault("farewelly_query_started", []).append(time.perf_counter())

    @event.listens_for(target, "after_cursor_execute")
    def _stop_timer(conn, _cursor, statement, _parameters, _context, _executemany):
        elapsed = time.perf_counter() - conn.info["farewelly_query_started"].pop()
        if elapsed > threshold:
            logger.warning(f"🐌 Slow query ({elapsed:.2f}s): {statement[:200]}...")


if ENABLE_QUERY_LOGGING:
    install_slow_query_logging(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """FastAPI dependency yielding a request-scoped session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
