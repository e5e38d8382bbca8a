"""Tests for request building helpers."""

import io
import json

import pytest

from hcloud_client.core.exceptions import RequestBuildError
from hcloud_client.core.request import build_headers, encode_body


class TestEncodeBody:
    def test_none(self):
        assert encode_body(None) is None

    def test_bytes_and_str(self):
        assert encode_body(b'{"a": 1}') == b'{"a": 1}'
        assert encode_body('{"name": "тест"}') == '{"name": "тест"}'.encode("utf-8")

    def test_stream(self):
        assert encode_body(io.BytesIO(b'{"a": 1}')) == b'{"a": 1}'

    def test_json_object(self):
        assert json.loads(encode_body({"name": "my-server", "labels": {"env": "prod"}})) == {
            "name": "my-server",
            "labels": {"env": "prod"},
        }

    def test_not_serializable(self):
        with pytest.raises(RequestBuildError):
            encode_body({"value": object()})

    def test_unsupported_type(self):
        with pytest.raises(RequestBuildError):
            encode_body(42)


class TestBuildHeaders:
    def test_without_body(self):
        headers = build_headers("hcloud-go/1.0.0", "secret", has_body=False)
        assert headers == {
            "User-Agent": "hcloud-go/1.0.0",
            "Authorization": "Bearer secret",
        }

    def test_with_body(self):
        headers = build_headers("hcloud-go/1.0.0", "secret", has_body=True)
        assert headers["Content-Type"] == "application/json"

    def test_empty_token(self):
        assert build_headers("ua", "", has_body=False)["Authorization"] == "Bearer "
