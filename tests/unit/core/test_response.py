"""Tests for response meta data parsing."""

import json
from datetime import datetime, timezone

import pytest

from hcloud_client.core.exceptions import MetaDecodeError
from hcloud_client.core.response import Pagination


def test_ratelimit_headers(make_response):
    response = make_response(200, b"{}", headers={
        "RateLimit-Limit": "3600",
        "RateLimit-Remaining": "3599",
        "RateLimit-Reset": "1700000000",
    })
    response.read_meta()

    assert response.meta.ratelimit.limit == 3600
    assert response.meta.ratelimit.remaining == 3599
    assert response.meta.ratelimit.reset == datetime.fromtimestamp(1700000000, tz=timezone.utc)


def test_ratelimit_headers_without_json(make_response):
    """Rate limit headers are read regardless of content type."""
    response = make_response(200, b"plain text", content_type="text/plain", headers={
        "RateLimit-Limit": "10",
        "RateLimit-Remaining": "0",
    })
    response.read_meta()

    assert response.meta.ratelimit.limit == 10
    assert response.meta.ratelimit.remaining == 0
    assert response.meta.pagination is None


def test_malformed_ratelimit_headers_leave_zero_values(make_response):
    response = make_response(200, b"{}", headers={
        "RateLimit-Limit": "lots",
        "RateLimit-Remaining": "",
        "RateLimit-Reset": "tomorrow",
    })
    response.read_meta()

    assert response.meta.ratelimit.limit == 0
    assert response.meta.ratelimit.remaining == 0
    assert response.meta.ratelimit.reset is None


def test_pagination(make_response):
    body = {
        "servers": [],
        "meta": {"pagination": {
            "page": 2, "per_page": 25, "previous_page": 1,
            "next_page": 3, "last_page": 4, "total_entries": 100,
        }},
    }
    response = make_response(200, json.dumps(body))
    response.read_meta()

    assert response.meta.pagination == Pagination(
        page=2, per_page=25, previous_page=1, next_page=3, last_page=4, total_entries=100
    )


def test_pagination_null_fields(make_response):
    body = {"meta": {"pagination": {
        "page": 1, "per_page": 25, "previous_page": None,
        "next_page": None, "last_page": 1, "total_entries": 3,
    }}}
    response = make_response(200, json.dumps(body))
    response.read_meta()

    assert response.meta.pagination.previous_page == 0
    assert response.meta.pagination.next_page == 0


def test_no_meta_block(make_response):
    response = make_response(200, b'{"server": {"id": 1}}')
    response.read_meta()
    assert response.meta.pagination is None


def test_pagination_ignored_for_non_json(make_response):
    response = make_response(200, b'{"meta": {"pagination": {"page": 1}}}', content_type="text/plain")
    response.read_meta()
    assert response.meta.pagination is None


def test_content_type_with_charset(make_response):
    response = make_response(
        200,
        b'{"meta": {"pagination": {"page": 1, "next_page": 2}}}',
        content_type="application/json; charset=utf-8",
    )
    response.read_meta()
    assert response.meta.pagination.next_page == 2


@pytest.mark.parametrize("content", [b"{not json", b"", b"[1, 2]", b'{"meta": 5}'])
def test_invalid_json_raises(make_response, content):
    response = make_response(200, content, headers={"RateLimit-Limit": "100"})

    with pytest.raises(MetaDecodeError) as exc_info:
        response.read_meta()

    assert "error reading response meta data" in str(exc_info.value)
    assert exc_info.value.response is response
    # Headers are parsed before the body
    assert response.meta.ratelimit.limit == 100


def test_envelope_accessors(make_response):
    response = make_response(404, b'{"a": 1}')
    assert response.status_code == 404
    assert response.is_error
    assert response.json() == {"a": 1}
    assert response.text == '{"a": 1}'
    assert not make_response(399).is_error
    assert make_response(599).is_error
    assert not make_response(600).is_error
