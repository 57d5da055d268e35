"""Shared pytest fixtures."""

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def quiet_logger():
    """Start every test without loguru sinks; CLI tests install their own."""
    logger.remove()
    yield
    logger.remove()
