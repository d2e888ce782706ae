"""
Pytest configuration and fixtures for plugin requirement tests
"""

import os
import sys
from unittest.mock import patch

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH119, PTH120

from cms_requirements.plugins import loader as loader_module  # noqa: E402
from cms_requirements.plugins.registry import plugin_registry  # noqa: E402
from utils.mocks import FakeEnvironment  # noqa: E402

RANDOM_PLUGIN_FILE = "file"
RANDOM_PLUGIN_NAME = "name"
RANDOM_PLUGIN_TEXTDOMAIN = "text"
ALWAYS_VALID_PYTHON_VERSION = "3.0"
ALWAYS_VALID_HOST_VERSION = "1.0"


@pytest.fixture(autouse=True)
def plugins_config_file(tmp_path):
    """Keep plugin state writes inside the test's temp directory."""
    config_path = tmp_path / "data" / "plugins_config.json"
    with patch.object(loader_module, "_PLUGINS_CONFIG_FILE", config_path):
        yield config_path


@pytest.fixture
def clean_registry():
    """Reset the global plugin registry around a test."""
    plugin_registry.__init__()
    yield plugin_registry
    plugin_registry.__init__()


@pytest.fixture
def environment():
    return FakeEnvironment(host_version=ALWAYS_VALID_HOST_VERSION)


@pytest.fixture
def make_checker(environment):
    """Factory for checkers bound to the fake environment."""
    from cms_requirements.plugins.requirement_checker import RequirementChecker

    def _make(python_version=ALWAYS_VALID_PYTHON_VERSION, host_version=ALWAYS_VALID_HOST_VERSION, env=None):
        return RequirementChecker(
            RANDOM_PLUGIN_FILE,
            RANDOM_PLUGIN_NAME,
            RANDOM_PLUGIN_TEXTDOMAIN,
            python_version,
            host_version,
            environment=env or environment,
        )

    return _make
