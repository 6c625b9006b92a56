import logging
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str, level: Optional[int] = None):
    """
    Logger with its own stream handler for command-line entry points.

    Calling it again for the same name only adjusts the level; it never
    stacks a second handler.
    """
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)

    if logger.handlers:
        return logger

    if level is None:
        logger.setLevel(logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    return logger
