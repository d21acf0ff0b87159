"""Shared test fixtures."""

import logging

import pytest


@pytest.fixture
def restore_logging():
    """setup_logging replaces the root handlers; put them back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
