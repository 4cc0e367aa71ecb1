"""
Barangay Services Backend - Main Application Entry Point
"""
import logging
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from app.api.router import api_router
from app.core.config import settings
from app.core.errors import (
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from app.core.logging import setup_logging
from app.db.session import SessionLocal
from app.services.auth_service import purge_expired_sessions
from app.services.notification_service import close_notifier
from app.services.staff_service import ensure_initial_admin

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in DATABASE_URL for safe logging; show full path for sqlite."""
    try:
        parsed = urlparse(url)
        if parsed.scheme == "sqlite":
            return url
        if parsed.password:
            netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
            if parsed.port:
                netloc += f":{parsed.port}"
            return urlunparse(parsed._replace(netloc=netloc))
    except ValueError:
        return "***"
    return url


app = FastAPI(
    title="Barangay Services Backend",
    description="Certificate requests, staff sessions and role-based access for barangay staff",
    version=settings.VERSION or "1.0.0"
)

# Configure CORS - must be before other middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_log_config() -> None:
    """Log DATABASE_URL at startup so it can be verified against Alembic."""
    masked = _mask_database_url(settings.DATABASE_URL)
    logger.info("DATABASE_URL (app): %s", masked)
    logger.info("Environment: %s, timezone: %s", settings.APP_ENV, settings.TZ)


@app.on_event("startup")
def bootstrap_initial_admin() -> None:
    """
    Create the initial admin account if none exists and drop sessions that
    expired while the service was down.
    """
    db = SessionLocal()
    try:
        ensure_initial_admin(
            db,
            username=settings.INITIAL_ADMIN_USERNAME,
            password=settings.INITIAL_ADMIN_PASSWORD,
            full_name=settings.INITIAL_ADMIN_FULL_NAME,
        )
        purge_expired_sessions(db)
    except OperationalError as e:
        # Tables might not exist yet
        if "no such table" in str(e).lower():
            logger.warning("Database tables not ready yet, skipping initial bootstrap")
        else:
            logger.error("Database error during admin bootstrap: %s", e)
        db.rollback()
    except HTTPException as e:
        logger.error("Initial admin bootstrap rejected: %s", e.detail)
        db.rollback()
    finally:
        db.close()


@app.on_event("shutdown")
def shutdown_notifier() -> None:
    close_notifier()


async def _handle_operational_error(request, exc: Exception):
    if "no such table" in str(exc).lower():
        return JSONResponse(
            status_code=500,
            content={"detail": "Run alembic upgrade head", "code": "INTERNAL_ERROR"},
        )
    return await generic_exception_handler(request, exc)


app.add_exception_handler(OperationalError, _handle_operational_error)
