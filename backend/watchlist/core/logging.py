"""
Loguru sink setup. Call *configure_logging* once at process start.
"""
import sys

from loguru import logger

from watchlist.core.config import settings

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with a stderr sink at the configured level."""
    global _configured
    if _configured:
        return
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.LOG_LEVEL).upper(),
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{line} - {message}",
        backtrace=settings.is_dev,
        diagnose=False,
    )
    _configured = True
