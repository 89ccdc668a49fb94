import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from app.platform.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def log_file_path() -> Optional[str]:
    """Resolve the rotating log file under ``LOG_DIR``, or None when file logging is off."""
    if not settings.LOG_FILE:
        return None

    log_dir = settings.LOG_DIR
    if not os.path.isabs(log_dir):
        log_dir = os.path.join(os.getcwd(), log_dir)
    os.makedirs(log_dir, exist_ok=True)
    return os.path.join(log_dir, settings.LOG_FILE)


def get_logger(name: str) -> logging.Logger:
    """
    Logger for ``name`` writing to the console and, unless disabled, a rotating file.

    Handlers are attached once; later calls return the configured logger.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logger.setLevel(level)
    # Handlers are attached here; don't duplicate records through the root logger
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [logging.StreamHandler()]

    path = log_file_path()
    if path:
        handlers.append(
            RotatingFileHandler(path, maxBytes=settings.LOG_MAX_BYTES, backupCount=settings.LOG_BACKUP_COUNT)
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        logger.addHandler(handler)

    return logger
