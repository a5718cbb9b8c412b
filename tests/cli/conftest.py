"""
Fixtures for CLI tests.
"""

import logging

import pytest


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo the root logger setup done by CLI.run()."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)
