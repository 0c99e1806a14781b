"""Logging setup for the bridge.

Every module logs through ``logging.getLogger(__name__)``; ``get_logger`` is
called once on the package root (the CLI does this from settings) to attach a
stderr handler and a size-rotated log file.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

DEFAULT_LOG_FILE = Path(".cache/crawl4ai_mcp.log")

MAX_LOG_SIZE_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 3


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Path | None = None,
) -> logging.Logger:
    """Attach console and rotating file handlers to the ``name`` logger.

    Args:
        name: Logger to configure, usually the package root "crawl4ai_mcp"
        log_level: Level name, case-insensitive (e.g. "debug", "WARNING")
        log_file: Log file path, defaults to .cache/crawl4ai_mcp.log

    Returns:
        The configured logger. Existing handlers are closed and replaced.

    Raises:
        ValueError: If log_level is not a logging level name.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    path = log_file or DEFAULT_LOG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [
        logging.StreamHandler(),
        RotatingFileHandler(path, maxBytes=MAX_LOG_SIZE_BYTES, backupCount=BACKUP_COUNT),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
