# core/logging_config.py
import logging

from core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME = "booth"


def setup_logger(level: str = "INFO") -> logging.Logger:
    """
    Configure the shared "booth" logger once per process.
    Every module logs through the instance exported below.
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Avoid duplicate handlers in dev reload
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream_handler)

    # Uvicorn configures the root logger too; keep records from doubling up
    logger.propagate = False

    return logger


logger = setup_logger(settings.LOG_LEVEL)
