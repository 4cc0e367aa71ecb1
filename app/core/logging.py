"""
Logging configuration for the Barangay Services Backend
"""
import logging
import sys
from app.core.config import settings


def setup_logging() -> None:
    """
    Configure Python logging based on settings

    Sets up:
    - Console handler with appropriate format
    - Log level from settings.LOG_LEVEL
    - Quieter levels for uvicorn access logs, SQLAlchemy and httpx
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Set log levels for third-party libraries
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured: level={settings.LOG_LEVEL}, env={settings.APP_ENV}")
