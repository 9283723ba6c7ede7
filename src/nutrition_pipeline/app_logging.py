"""Logging configuration helpers."""

import logging

LOGGER_NAME = "nutrition_pipeline"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Attach one stream handler to the package logger.

    Repeated calls only update the level, so building several apps in one
    process never duplicates output. ``level`` accepts a number or a name
    such as ``"DEBUG"``.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
