import logging
import time

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import text

from app.core.config import settings
from app.schemas.health import ServiceHealth

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL


def create_db_engine(url: str) -> Engine:
    """
    Create an engine for ``url``.

    In-memory SQLite shares one connection across threads so every session
    sees the same database.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


engine = create_db_engine(SQLALCHEMY_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def health_check(db: Session) -> ServiceHealth:
    """Check database health."""
    started = time.perf_counter()
    try:
        result = db.execute(text("SELECT 1")).scalar()
    except Exception as e:  # pylint: disable=broad-except
        logger.error("Database health check failed: %s", str(e))
        return ServiceHealth(
            healthy=False, message=f"Database connection failed: {str(e)}"
        )

    latency_ms = round((time.perf_counter() - started) * 1000, 2)
    if result == 1:
        return ServiceHealth(
            healthy=True,
            message="Database connection successful",
            latency_ms=latency_ms,
        )
    return ServiceHealth(
        healthy=False,
        message="Database query returned unexpected result",
        latency_ms=latency_ms,
    )
