"""Pytest configuration and shared fixtures.

Unit tests in isoprobe/tests/unit/ run against fake sessions. Integration
tests in isoprobe/tests/integration/ need live MySQL/PostgreSQL servers and
skip per engine when a server is unreachable.
"""

from __future__ import annotations

import logging

import pytest

from isoprobe.core.config import get_settings
from isoprobe.core.logging import set_scenario_label


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark integration tests and give them a longer timeout.

    Timeout hierarchy (highest priority first):
    1. Explicit @pytest.mark.timeout(N) on test - unchanged
    2. Integration tests (in integration/ directory) - 30 seconds
    3. Default from pyproject.toml - 5 seconds
    """
    for item in items:
        if "/integration/" not in str(item.fspath):
            continue
        item.add_marker(pytest.mark.integration)
        if not item.get_closest_marker("timeout"):
            item.add_marker(pytest.mark.timeout(30))


@pytest.fixture(autouse=True)
def clean_state():
    """Reset cached settings and the scenario label around every test."""
    get_settings.cache_clear()
    set_scenario_label(None)
    yield
    get_settings.cache_clear()
    set_scenario_label(None)


@pytest.fixture
def restore_logging():
    """Restore root logger handlers after a test reconfigures logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    filters = list(root.filters)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.filters[:] = filters
    root.setLevel(level)
