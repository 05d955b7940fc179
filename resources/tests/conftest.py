"""Pytest configuration for resources/tests.

Ensures the repository root is on sys.path so tests can import
helpers via absolute package path like `resources.tests.helpers`.
"""

import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from apphost.utils.config import HostSettings  # noqa: E402
from apphost.utils.logging import ROOT_LOGGER_NAME  # noqa: E402


@pytest.fixture
def test_settings(tmp_path):
    """Host settings with slow periodic loops and a temporary data root."""
    return HostSettings(
        app_name="testhost",
        data_dir_root=str(tmp_path),
        status_log_interval_seconds=60,
        benchmark_log_interval_seconds=60,
    )


@pytest.fixture(autouse=True)
def restore_logger_levels():
    """Undo logger level changes made by LoggingConfiguration.apply()."""
    manager = logging.Logger.manager
    saved = {
        name: logger.level
        for name, logger in manager.loggerDict.items()
        if isinstance(logger, logging.Logger) and name.startswith(ROOT_LOGGER_NAME)
    }
    yield
    for name, logger in list(manager.loggerDict.items()):
        if isinstance(logger, logging.Logger) and name.startswith(ROOT_LOGGER_NAME):
            logger.setLevel(saved.get(name, logging.NOTSET))
