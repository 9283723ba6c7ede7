"""Tests for logging configuration."""

import logging

from nutrition_pipeline.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("nutrition_pipeline")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_configure_logging_sets_level_and_stops_propagation() -> None:
    logger = logging.getLogger("nutrition_pipeline")
    logger.handlers.clear()

    configure_logging(logging.DEBUG)

    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert logging.getLogger("nutrition_pipeline.services.resolver").getEffectiveLevel() == (
        logging.DEBUG
    )


def test_configure_logging_accepts_level_names() -> None:
    logger = logging.getLogger("nutrition_pipeline")
    logger.handlers.clear()

    configure_logging("warning")
    assert logger.level == logging.WARNING

    configure_logging("not-a-level")
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
