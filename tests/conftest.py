"""
Pytest configuration and fixtures for WebSub subscriber tests.
"""

from unittest.mock import AsyncMock

import pytest

from websub_subscriber.config.settings import Settings
from websub_subscriber.hub.client import HubClient


@pytest.fixture
def test_environ():
    """Environment describing a complete configuration."""
    return {
        "PORT": "8181",
        "PUBLIC_BASE_URL": "https://example.ngrok.io",
        "YOUTUBE_CHANNEL_ID": "UC_test_channel",
        "VERIFY_TOKEN": "devtoken",
    }


@pytest.fixture
def test_settings():
    """Create test settings."""
    return Settings(
        port=8181,
        public_base_url="https://example.ngrok.io",
        youtube_channel_id="UC_test_channel",
        verify_token="devtoken",
        renew_interval_seconds=3600,
        log_level="DEBUG",
    )


@pytest.fixture
def mock_hub_client():
    """Create a mock hub client that accepts every subscribe request."""
    client = AsyncMock(spec=HubClient)
    client.subscribe.return_value = None
    return client
