"""Тесты классификации ошибок."""

import json

import pytest
import requests

from hcloud_client.core.error_handler import ErrorHandler
from hcloud_client.core.exceptions import (
    APIError,
    ConnectionError,
    ErrorCode,
    HTTPError,
    InvalidInputDetails,
    InvalidInputField,
    TimeoutError,
    TransportError,
)


def error_body(code, message, details=None):
    error = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return json.dumps({"error": error})


class TestErrorFromResponse:
    def test_structured_error(self, make_response):
        response = make_response(404, error_body("not_found", "no such resource"))

        error = ErrorHandler.error_from_response(response)

        assert isinstance(error, APIError)
        assert error.code == ErrorCode.NOT_FOUND
        assert error.code == "not_found"
        assert error.message == "no such resource"
        assert error.details is None
        assert error.status_code == 404
        assert error.response is response

    def test_non_json_content_type(self, make_response):
        response = make_response(500, error_body("service_error", "boom"), content_type="text/html")
        assert ErrorHandler.error_from_response(response) is None

    def test_invalid_json(self, make_response):
        response = make_response(502, "<html>Bad Gateway</html>")
        assert ErrorHandler.error_from_response(response) is None

    def test_empty_code_and_message(self, make_response):
        response = make_response(400, error_body("", ""))
        assert ErrorHandler.error_from_response(response) is None

    def test_missing_error_object(self, make_response):
        assert ErrorHandler.error_from_response(make_response(400, '{"foo": 1}')) is None
        assert ErrorHandler.error_from_response(make_response(400, '[1]')) is None
        assert ErrorHandler.error_from_response(make_response(400, '{"error": "x"}')) is None

    def test_message_only(self, make_response):
        error = ErrorHandler.error_from_response(make_response(400, error_body("", "broken")))
        assert error.code == ""
        assert error.message == "broken"

    def test_invalid_input_details(self, make_response):
        details = {"fields": [
            {"name": "name", "messages": ["is too long", "is invalid"]},
            {"name": "image", "messages": ["is required"]},
        ]}
        response = make_response(400, error_body("invalid_input", "invalid input", details))

        error = ErrorHandler.error_from_response(response)

        assert error.details == InvalidInputDetails(fields=[
            InvalidInputField(name="name", messages=["is too long", "is invalid"]),
            InvalidInputField(name="image", messages=["is required"]),
        ])

    def test_unknown_details_variant(self, make_response):
        response = make_response(409, error_body("conflict", "conflict", {"something": 1}))
        error = ErrorHandler.error_from_response(response)
        assert error.code == "conflict"
        assert error.details is None

    @pytest.mark.parametrize("error", [
        {"code": 123, "message": "m"},
        {"code": "not_found", "message": ["m"]},
        {"code": {"x": 1}, "message": None},
    ])
    def test_non_string_code_or_message(self, make_response, error):
        response = make_response(404, json.dumps({"error": error}))

        assert ErrorHandler.error_from_response(response) is None
        assert type(ErrorHandler.error_for_status(response)) is HTTPError

    def test_null_code_with_message(self, make_response):
        error = ErrorHandler.error_from_response(make_response(400, '{"error": {"code": null, "message": "m"}}'))
        assert error.code == ""
        assert error.message == "m"

    def test_unknown_code_passes_through(self, make_response):
        error = ErrorHandler.error_from_response(make_response(400, error_body("brand_new", "new")))
        assert error.code == "brand_new"


class TestErrorForStatus:
    def test_generic_error(self, make_response):
        error = ErrorHandler.error_for_status(make_response(503, "", content_type="text/plain"))
        assert type(error) is HTTPError
        assert error.status_code == 503
        assert str(error) == "hcloud: server responded with status code 503"

    def test_structured(self, make_response):
        error = ErrorHandler.error_for_status(make_response(403, error_body("forbidden", "nope")))
        assert isinstance(error, APIError)
        assert str(error) == "nope (forbidden)"


class TestTransportExceptions:
    @pytest.mark.parametrize("exc, expected", [
        (requests.exceptions.ConnectTimeout(), TimeoutError),
        (requests.exceptions.ReadTimeout(), TimeoutError),
        (requests.exceptions.ConnectionError(), ConnectionError),
        (requests.exceptions.TooManyRedirects(), TransportError),
        (RuntimeError("x"), TransportError),
    ])
    def test_requests(self, exc, expected):
        error = ErrorHandler.handle_transport_exception(exc, "https://api.example.com")
        assert isinstance(error, expected)
        assert error.url == "https://api.example.com"

    def test_httpx(self):
        httpx = pytest.importorskip("httpx")
        assert isinstance(
            ErrorHandler.handle_transport_exception(httpx.ConnectError("refused"), "u"),
            ConnectionError,
        )
        assert isinstance(
            ErrorHandler.handle_transport_exception(httpx.ReadTimeout("slow"), "u"),
            TimeoutError,
        )

    def test_httpx_request_errors_outside_transport_error(self):
        httpx = pytest.importorskip("httpx")
        for exc in (httpx.TooManyRedirects("loop"), httpx.DecodingError("bad gzip")):
            error = ErrorHandler.handle_transport_exception(exc, "u")
            assert type(error) is TransportError


def test_is_rate_limited():
    assert ErrorHandler.is_rate_limited(APIError("rate_limit_exceeded", "slow down", status_code=429))
    assert not ErrorHandler.is_rate_limited(APIError("not_found", "gone", status_code=404))
    assert not ErrorHandler.is_rate_limited(HTTPError(429))
