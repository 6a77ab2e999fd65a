# core/logging_config.py
import logging

from core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME = "society"


def setup_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)

    # Avoid duplicate handlers in dev reload
    if logger.handlers:
        return logger

    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    logger.setLevel(level if isinstance(level, int) else logging.INFO)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream_handler)

    # Handled by our own stream handler; keep uvicorn's root config out of it
    logger.propagate = False

    return logger


def get_logger(component: str) -> logging.Logger:
    """Child logger, e.g. ``society.realtime``."""
    return logging.getLogger(f"{LOGGER_NAME}.{component}")


logger = setup_logger()
