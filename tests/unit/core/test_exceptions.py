"""Тесты иерархии исключений."""

import pytest

from hcloud_client.core.exceptions import (
    APIError,
    ConnectionError,
    DeadlineExceededError,
    ErrorCode,
    HCloudException,
    HTTPError,
    InvalidInputDetails,
    MetaDecodeError,
    RequestCancelledError,
    TooManyRetriesError,
    TransportError,
)


def test_hierarchy():
    assert issubclass(TransportError, HCloudException)
    assert issubclass(ConnectionError, TransportError)
    assert issubclass(DeadlineExceededError, RequestCancelledError)
    assert issubclass(APIError, HTTPError)
    assert issubclass(MetaDecodeError, HCloudException)


def test_transport_error_message_contains_url():
    error = ConnectionError("Connection refused", "https://api.example.com/v1/servers")
    assert str(error) == "Connection refused (url: https://api.example.com/v1/servers)"
    assert error.url == "https://api.example.com/v1/servers"


def test_api_error():
    error = APIError("not_found", "server not found", status_code=404)
    assert str(error) == "server not found (not_found)"
    assert error.message == "server not found"
    assert error.code == ErrorCode.NOT_FOUND
    assert error.status_code == 404
    assert error.fatal
    assert not error.retryable


def test_rate_limit_is_retryable():
    error = APIError(ErrorCode.RATE_LIMIT_EXCEEDED.value, "limit reached", status_code=429)
    assert error.retryable
    assert not error.fatal


def test_from_schema():
    error = APIError.from_schema({
        "code": "invalid_input",
        "message": "invalid input in field 'name'",
        "details": {"fields": [{"name": "name", "messages": ["is too long"]}]},
    }, status_code=400)

    assert isinstance(error.details, InvalidInputDetails)
    assert error.details.fields[0].name == "name"
    assert error.details.fields[0].messages == ["is too long"]


def test_from_schema_details_only_for_known_codes():
    error = APIError.from_schema({"code": "locked", "message": "locked", "details": {"fields": []}})
    assert error.details is None


def test_meta_decode_error_message():
    error = MetaDecodeError("Expecting value")
    assert str(error) == "hcloud: error reading response meta data: Expecting value"


def test_too_many_retries_error():
    last = APIError("rate_limit_exceeded", "limit reached", status_code=429)
    error = TooManyRetriesError(max_retries=3, last_error=last, url="https://api.example.com/v1/servers")

    assert error.max_retries == 3
    assert error.last_error is last
    assert "Max retries (3) exceeded" in str(error)
    assert "limit reached (rate_limit_exceeded)" in str(error)


def test_base_exception_takes_message_only():
    error = HCloudException("boom")
    assert error.message == "boom"
    with pytest.raises(TypeError):
        HCloudException("boom", url="https://api.example.com")
