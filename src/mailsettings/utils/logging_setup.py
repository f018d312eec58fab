"""
Logging setup for the mailsettings screen.

Everything logs under the "mailsettings" logger. Level, console output and
the log file location all come from AppConfig.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..config.app_config import AppConfig

LOGGER_NAME = "mailsettings"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Rotate at 10MB, keep 5 old files
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

# requests logs every connection through urllib3 at DEBUG
CHATTY_LOGGERS = ("urllib3",)


def setup_logging(config: "AppConfig", log_file: Optional[Path] = None) -> Path:
    """
    Configure the mailsettings logger from the application config.

    Args:
        config: Application configuration (logging section and data dir).
        log_file: Override for the log file path.

    Returns:
        Path: The log file in use.
    """
    level_name = config.logging.level.upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    log_file = log_file or config.get_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.handlers.RotatingFileHandler(
        filename=log_file,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8"
    )]
    if config.logging.console_output:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if numeric_level > logging.DEBUG:
        for name in CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logger.info(f"Logging at {level_name} to {log_file}")
    logger.debug(f"Backend: {config.api.base_url}")
    return log_file


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        logging.Logger: Logger nested under the mailsettings logger.
    """
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
