"""
Pytest configuration and shared fixtures
"""

import pytest
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.test_utils import create_test_config, create_test_settings
from tests.fixtures.market_fixtures import make_market


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (local servers, temp databases)"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically"""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def test_config():
    """Provide test configuration groups"""
    return create_test_config()


@pytest.fixture
def test_settings(test_config):
    """Settings built from test_config with Telegram credentials and no process env"""
    return create_test_settings(test_config)


@pytest.fixture
def test_database_path(tmp_path):
    """
    Provide temporary database path for testing.

    Returns absolute path to a temporary database file that will be
    cleaned up after the test completes.
    """
    return str(tmp_path / "test_weekly_watch.db")


@pytest.fixture
def test_database_url(test_database_path):
    return f"sqlite+aiosqlite:///{test_database_path}"


@pytest.fixture
def market_factory():
    return make_market


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Setup logging for tests"""
    import logging

    # Reduce log level for external libraries during tests
    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('aiosqlite').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy').setLevel(logging.WARNING)
