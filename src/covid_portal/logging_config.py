"""
Logging setup for the portal API.

Loguru is the single logging backend. Records emitted through the stdlib
``logging`` module (uvicorn, FastAPI, psycopg2) are intercepted and routed
through Loguru so everything shares one format and one level.
"""
import logging
import sys

from loguru import logger

from covid_portal import config


# PUBLIC_INTERFACE
def setup_logging() -> None:
    """Configure Loguru and intercept stdlib logging. Safe to call more than once."""
    logger.remove()

    level = config.log_level()
    if config.log_json():
        logger.add(sys.stdout, level=level, format="{message}", serialize=True)
    else:
        logger.add(
            sys.stdout,
            level=level,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "{message}"
            ),
            colorize=True,
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for noisy in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug("Logging configured at level {}", level)


class _InterceptHandler(logging.Handler):
    """Route stdlib logging records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip frames belonging to the logging module itself
        frame, depth = logging.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())
