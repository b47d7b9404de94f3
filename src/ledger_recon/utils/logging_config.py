"""Logging setup driven by the `logging` section of the configuration."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from ..config import LoggingConfig

ROOT_LOGGER_NAME = "ledger_recon"

# A run logs one DEBUG line per accepted match
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 3
LOG_FILE_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
)


def resolve_level(name: str) -> int:
    """
    Turn a level name such as "debug" into its logging constant.

    Raises:
        ConfigurationError: If the name is not a logging level
    """
    level = logging.getLevelName(str(name).strip().upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown logging level: {name}")
    return level


def setup_logging(logging_config: "LoggingConfig", verbose: bool = False) -> logging.Logger:
    """
    Configure the ledger_recon logger.

    The console shows `logging_config.level` (DEBUG when verbose). When
    `logging_config.file` is set, a rotating file also receives the DEBUG
    tier and match decisions whatever the console level.

    Args:
        logging_config: Level, format and optional log file path
        verbose: Force DEBUG output on the console

    Returns:
        The package root logger
    """
    console_level = logging.DEBUG if verbose else resolve_level(logging_config.level)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(console_level)

    # Repeated CLI invocations in one process must not stack handlers
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(logging_config.format))
    logger.addHandler(console_handler)

    if logging_config.file:
        log_file = Path(logging_config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FILE_FORMAT))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)
        logger.debug(f"Writing debug log to {log_file}")

    return logger
