"""Test configuration."""

import os
from pathlib import Path
from typing import List

import pytest
from dotenv import load_dotenv
from pytest import Config

project_dir = Path(__file__).parent.parent

# Load .env.test for tests, keeping real provider keys from the environment
env_test_file = project_dir / ".env.test"
if env_test_file.exists():
    real_api_keys = {
        key: os.environ[key]
        for key in ("MAPBOX_ACCESS_TOKEN", "GOOGLE_GEOCODING_API_KEY")
        if os.environ.get(key)
    }
    load_dotenv(env_test_file, override=True)
    os.environ.update(real_api_keys)

from placeresolver.core.logging import configure_logging  # noqa: E402

fixture = pytest.fixture


@fixture(scope="session")
def project_root() -> Path:
    """Get the project root directory."""
    return project_dir


pytest_plugins: List[str] = [
    "tests.fixtures.geocoding",
]


def pytest_configure(config: Config) -> None:
    """Configure pytest.

    Args:
        config: Pytest configuration object
    """
    # Configure logging for test environment
    configure_logging(testing=True)
    config.addinivalue_line("markers", "integration: mark test as an integration test")
