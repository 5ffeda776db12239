"""Root conftest: shared test configuration."""

import logging
import os

import pytest

from license_engine.config import get_settings
from license_engine.core.category_catalog import build_default_catalog
from license_engine.infrastructure.observability import ENGINE_LOGGER

# Tests must never pick up a deployment catalog or policy from the environment
for _var in ("CATALOG_PATH", "CAPTURE_DUPLICATE_POLICY", "LOG_LEVEL", "LOG_FORMAT"):
    os.environ.pop(_var, None)


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _restore_engine_logger():
    engine_logger = logging.getLogger(ENGINE_LOGGER)
    handlers, level = list(engine_logger.handlers), engine_logger.level
    yield
    engine_logger.handlers[:] = handlers
    engine_logger.setLevel(level)


@pytest.fixture(scope="session")
def catalog():
    return build_default_catalog()
