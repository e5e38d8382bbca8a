# src/hcloud_client/core/response.py
"""
Response envelope with pagination and rate limit meta data.

Works on top of both ``requests.Response`` and ``httpx.Response``: only
``status_code``, ``headers`` and ``url`` of the raw response are used, the
body is always buffered by the execution engine beforehand.
"""
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from .exceptions import MetaDecodeError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def is_json_content_type(headers: Mapping[str, str]) -> bool:
    """Check that Content-Type starts with application/json."""
    return (headers.get("Content-Type") or "").startswith(JSON_CONTENT_TYPE)


@dataclass(frozen=True)
class Pagination:
    """Pagination meta information reported by the API."""

    page: int = 0
    per_page: int = 0
    previous_page: int = 0
    next_page: int = 0
    last_page: int = 0
    total_entries: int = 0

    @classmethod
    def from_schema(cls, schema: Mapping[str, Any]) -> 'Pagination':
        """Build from the ``meta.pagination`` JSON block (null fields become 0)."""
        return cls(
            page=_int_field(schema, "page"),
            per_page=_int_field(schema, "per_page"),
            previous_page=_int_field(schema, "previous_page"),
            next_page=_int_field(schema, "next_page"),
            last_page=_int_field(schema, "last_page"),
            total_entries=_int_field(schema, "total_entries"),
        )


@dataclass
class RateLimit:
    """Rate limit information from the ``RateLimit-*`` response headers."""

    limit: int = 0
    remaining: int = 0
    reset: Optional[datetime] = None


@dataclass
class Meta:
    """Meta information included in an API response."""

    pagination: Optional[Pagination] = None
    ratelimit: RateLimit = field(default_factory=RateLimit)


class Response:
    """
    API response: raw transport response, buffered body and parsed meta.

    Attributes:
        raw: Underlying ``requests.Response`` / ``httpx.Response``
        content: Buffered response body
        meta: Pagination and rate limit meta data

    Example:
        >>> response = client.do(client.new_request("GET", "/servers"))
        >>> response.meta.ratelimit.remaining
        3599
        >>> response.meta.pagination.next_page
        2
    """

    def __init__(self, raw: Any, content: bytes = b""):
        self.raw = raw
        self.content = content
        self.meta = Meta()

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}]>"

    @property
    def status_code(self) -> int:
        return self.raw.status_code

    @property
    def headers(self) -> Mapping[str, str]:
        return self.raw.headers

    @property
    def url(self) -> str:
        return str(self.raw.url)

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @property
    def is_error(self) -> bool:
        """True for status codes in the inclusive range [400, 599]."""
        return 400 <= self.status_code <= 599

    def json(self) -> Any:
        """Decode the buffered body as JSON."""
        return json.loads(self.content)

    def read_meta(self) -> None:
        """
        Populate ``meta`` from headers and, for JSON responses, the body.

        Rate limit headers are parsed opportunistically: missing or malformed
        values leave the zero value. The pagination block is read only when
        Content-Type is JSON.

        Raises:
            MetaDecodeError: Body claims to be JSON but does not parse
        """
        ratelimit = self.meta.ratelimit
        ratelimit.limit = _int_header(self.headers, "RateLimit-Limit", ratelimit.limit)
        ratelimit.remaining = _int_header(self.headers, "RateLimit-Remaining", ratelimit.remaining)

        reset = self.headers.get("RateLimit-Reset")
        if reset:
            try:
                ratelimit.reset = datetime.fromtimestamp(int(reset), tz=timezone.utc)
            except (ValueError, OverflowError, OSError):
                logger.debug("Ignoring malformed RateLimit-Reset header: %r", reset)

        if not is_json_content_type(self.headers):
            return

        try:
            body = json.loads(self.content)
        except ValueError as e:
            raise MetaDecodeError(str(e), response=self) from e

        if body is None:
            return
        if not isinstance(body, dict):
            raise MetaDecodeError(
                f"expected JSON object, got {type(body).__name__}",
                response=self
            )

        meta = body.get("meta")
        if meta is None:
            return
        if not isinstance(meta, dict):
            raise MetaDecodeError("'meta' is not an object", response=self)

        pagination = meta.get("pagination")
        if pagination is None:
            return
        if not isinstance(pagination, dict):
            raise MetaDecodeError("'meta.pagination' is not an object", response=self)

        try:
            self.meta.pagination = Pagination.from_schema(pagination)
        except (TypeError, ValueError) as e:
            raise MetaDecodeError(str(e), response=self) from e


def _int_header(headers: Mapping[str, str], name: str, default: int) -> int:
    value = headers.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.debug("Ignoring malformed %s header: %r", name, value)
        return default


def _int_field(schema: Mapping[str, Any], name: str) -> int:
    value = schema.get(name)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"pagination field '{name}' must be an integer, got {value!r}")
    return value
