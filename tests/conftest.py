"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Configuration caches and named semaphores are module-level state; they are
reset around every test so one test's environment never leaks into the next.
"""

import logging
from collections.abc import Generator

import pytest

from nestor.core import logging as logging_module
from nestor.core.concurrency import reset_semaphores
from nestor.core.config import get_app_config, get_settings


@pytest.fixture(autouse=True)
def _reset_global_state() -> Generator[None, None, None]:
    """Clear cached configuration and semaphores before and after each test."""
    get_settings.cache_clear()
    get_app_config.cache_clear()
    logging_module._logging_config = None
    reset_semaphores()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()
    logging_module._logging_config = None
    reset_semaphores()


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Generator[None, None, None]:
    """Undo handlers installed by setup_logging (the CLI callback calls it)."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
