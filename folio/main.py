"""Main FastAPI application."""

import logging
import re
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from . import __version__
from .api import documents_router, folders_router, groups_router, sharing_router
from .core.config import settings, ConfigurationError, Environment
from .core.logging_config import setup_logging
from .database import DATABASE_URL, engine, get_db, init_db
from .exceptions import FolioException
from .middleware.exception_handler import folio_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .relationships import close_relationship_store

setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


def _validate_database_connection() -> None:
    """Fail startup with a readable message when the metadata store is unreachable."""
    masked = _mask_url(DATABASE_URL)
    logger.info(f"Connecting to database: {masked}")
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.critical(
            "Database connection failed.\n"
            f"  DATABASE_URL: {masked}\n"
            f"  Error: {e}"
        )
        raise SystemExit(1) from e
    logger.info("Database connection verified")


def _log_security_warnings() -> None:
    if settings.share_policy == "open":
        logger.warning(
            "SECURITY: SHARE_POLICY=open. Any caller, authenticated or not, can grant "
            "any relation on any object via PUT /share. Set SHARE_POLICY=owner to restrict."
        )
    if settings.environment == Environment.DEVELOPMENT:
        if settings.jwt_secret_key == "dev-insecure-key-change-me":
            logger.warning(
                "SECURITY: JWT_SECRET_KEY is the default. Anyone can forge caller tokens. "
                "Generate a secure key: openssl rand -hex 32"
            )
        if settings.relationship_store == "memory":
            logger.warning("RELATIONSHIP_STORE=memory: grants are lost on restart.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the Folio API."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    _log_security_warnings()
    _validate_database_connection()
    init_db()

    logger.info(
        "Folio API started | env=%s | store=%s | share_policy=%s | intents=%s",
        settings.environment.value,
        settings.relationship_store,
        settings.share_policy,
        "enabled" if settings.write_intents_enabled else "disabled",
    )

    yield

    close_relationship_store()


app = FastAPI(
    title="Folio API",
    description=(
        "Folders, documents and groups whose permissions live in a relationship "
        "store (OpenFGA). Send `Authorization: Bearer <jwt>`; the `sub` claim "
        "identifies the caller."
    ),
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(FolioException, folio_exception_handler)

app.include_router(folders_router)
app.include_router(documents_router)
app.include_router(groups_router)
app.include_router(sharing_router)


@app.get("/")
def root():
    return {
        "name": "Folio API",
        "version": __version__,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Liveness plus a metadata store probe.

    Never raises, so load balancers get a degraded status instead of a 5xx.
    The relationship store is not probed: a check needs a real tuple.
    """
    db_status = "ok"
    try:
        db.execute(text("SELECT 1"))
    except Exception:
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "relationship_store": settings.relationship_store,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": __version__,
    }
