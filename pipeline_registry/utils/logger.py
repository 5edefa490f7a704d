"""
Logging utilities for the pipeline registry.

All output goes through loguru. Records emitted with the standard
library ``logging`` module by uvicorn, fastapi, sqlalchemy or aiosqlite
are forwarded into the same sinks, so one configuration covers the
whole process.
"""

import inspect
import logging
import sys

from loguru import logger as _logger

from pipeline_registry.settings import Settings, settings

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Standard library loggers forwarded into loguru
INTERCEPTED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "sqlalchemy",
    "aiosqlite",
)

LOG_FILE_NAME = "pipeline_registry.log"


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging internals so loguru reports the real call site
        frame, depth = inspect.currentframe(), 0
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        _logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(config: Settings) -> None:
    """
    Configure loguru sinks from settings.

    A colorized stderr sink is always installed. When ``log_to_file`` is set
    a rotating file sink is added under :meth:`Settings.get_log_dir`, written
    as JSON lines if ``log_serialize`` is set.

    Args:
        config: Settings to read the log level, format and file options from
    """
    log_format = config.log_format or DEFAULT_FORMAT

    _logger.remove()
    _logger.add(
        sys.stderr,
        level=config.log_level,
        format=log_format,
        colorize=True,
        backtrace=True,
        diagnose=config.debug,
    )

    if config.log_to_file:
        log_dir = config.get_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        _logger.add(
            str(log_dir / LOG_FILE_NAME),
            level=config.log_level,
            format=log_format,
            rotation=config.log_rotation,
            retention=config.log_retention,
            compression="zip",
            serialize=config.log_serialize,
            backtrace=True,
            diagnose=config.debug,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [InterceptHandler()]
        stdlib_logger.propagate = False


setup_logging(settings)

logger = _logger
