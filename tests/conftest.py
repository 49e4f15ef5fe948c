"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

import pytest

from src.sync_engine.context import SyncContext


@pytest.fixture(autouse=True)
def reset_app_logger():
    """Drop handlers the CLI attached to the 'src' logger during a test."""
    yield
    app_logger = logging.getLogger("src")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
    app_logger.setLevel(logging.NOTSET)


@pytest.fixture
def context(tmp_path) -> SyncContext:
    """Sync context rooted in a temporary working directory."""
    return SyncContext(working_dir=str(tmp_path), endpoint="https://cms.example.com/api", identity="tester")
