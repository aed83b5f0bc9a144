import logging
import os
from logging.handlers import RotatingFileHandler

from stock_backend.config import LOG_LEVEL, LOG_PATH

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def create_logger(name: str) -> logging.Logger:
    """
    Create a logger that writes to stdout and to a rotating log file.

    Args:
        name: Logger name, usually the module's __name__

    Returns:
        logging.Logger: Configured logger
    """
    logger = logging.getLogger(name)

    # Handlers are attached once per logger name
    if logger.handlers:
        return logger

    logger.setLevel(LOG_LEVEL.upper())
    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if LOG_PATH:
        try:
            os.makedirs(os.path.dirname(LOG_PATH) or ".", exist_ok=True)
            file_handler = RotatingFileHandler(LOG_PATH, maxBytes=5 * 1024 * 1024, backupCount=3)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"File logging disabled ({LOG_PATH}): {e}")

    logger.propagate = False
    return logger
