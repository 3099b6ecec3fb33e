"""Pytest configuration.

Run pytest from this project's root; pythonpath in pyproject.toml puts src/
and the project root (for tests.tree_builders) on sys.path.
"""

import pytest

from bugscope.infrastructure.di.container import BugscopeContainer


@pytest.fixture(autouse=True)
def _reset_container_singleton():
    """Tests never share the process-wide container."""
    yield
    BugscopeContainer._instance = None
