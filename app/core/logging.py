# app/core/logging.py

import sys

from loguru import logger

from app.core.config import settings


def configure_logging() -> None:
    """Single stdout sink, same format for the API process and background tasks."""
    logger.remove()
    logger.add(
        sys.stdout,
        level=settings.LOG_LEVEL.upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
               "<level>{level}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
               "<level>{message}</level>",
        colorize=True,
        backtrace=True,
        diagnose=settings.ENV != "prod",
    )
