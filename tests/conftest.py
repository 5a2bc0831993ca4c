"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import httpx
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Base64 secret whose signature vector is known
TEST_SECRET = "zZ=="


@pytest.fixture
def credentials():
    from src.coinbasepro.auth import Credentials
    return Credentials(key="key", passphrase="passphrase", secret=TEST_SECRET)


@pytest.fixture
def make_api(credentials):
    """Build an APIClient whose HTTP traffic goes to ``handler``."""
    from src.coinbasepro.api import APIClient

    clients = []

    def _make(handler, **kwargs):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(http_client)
        return APIClient(
            "https://api.test",
            credentials,
            http_client=http_client,
            timestamp=lambda: "1",
            **kwargs,
        )

    return _make


@pytest.fixture(autouse=True)
def reset_settings():
    """Clear the cached settings singleton around each test."""
    from src.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
