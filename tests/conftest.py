"""
Pytest configuration and fixtures for hcloud-client-core tests.
"""

from unittest.mock import Mock

import pytest
import responses as responses_lib
from requests.structures import CaseInsensitiveDict

from hcloud_client import HCloudClient, ClientConfig
from hcloud_client.core.logging.config import LoggingConfig
from hcloud_client.core.response import Response


@pytest.fixture
def endpoint():
    """Endpoint for testing."""
    return "https://api.example.com/v1"


@pytest.fixture
def mock_responses():
    """Mock HTTP responses using responses library."""
    with responses_lib.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def backoff_calls():
    """List of retries values passed to the recording backoff."""
    return []


@pytest.fixture
def recording_backoff(backoff_calls):
    """Backoff that records every call and never sleeps."""
    def backoff(retries):
        backoff_calls.append(retries)
        return 0
    return backoff


@pytest.fixture
def client(endpoint, recording_backoff):
    """Client without real backoff sleeps."""
    config = ClientConfig(endpoint=endpoint, token="test-token", backoff=recording_backoff)
    client = HCloudClient(config=config)
    yield client
    client.close()


@pytest.fixture
def make_response():
    """
    Factory for Response envelopes around a fake raw response.

    Example:
        def test_x(make_response):
            response = make_response(404, b'{"error": {}}')
    """
    def factory(status_code=200, content=b"", headers=None, content_type="application/json"):
        raw = Mock()
        raw.status_code = status_code
        raw.url = "https://api.example.com/v1/servers"
        raw.headers = CaseInsensitiveDict(headers or {})
        if content_type is not None:
            raw.headers.setdefault("Content-Type", content_type)
        if isinstance(content, str):
            content = content.encode("utf-8")
        return Response(raw, content)
    return factory


@pytest.fixture
def logging_config_with_file(tmp_path):
    """LoggingConfig with file logging into a temporary directory."""
    return LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(tmp_path / "client.log")
    )
