"""Outgoing request value and body encoding."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .context import RequestContext
from .exceptions import RequestBuildError

JSON_CONTENT_TYPE = "application/json"


@dataclass
class Request:
    """Request built by ``new_request``, ready to be sent (and resent) as-is.

    Attributes:
        method: HTTP method
        url: Absolute URL (endpoint + path)
        headers: User-Agent, Authorization and, with a body, Content-Type
        body: Raw JSON bytes or None
        context: Cancellation context bound at build time
        prepared: Transport-specific request object (``requests.PreparedRequest``
            or ``httpx.Request``)
    """

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    context: RequestContext = field(default_factory=RequestContext)
    prepared: Any = field(default=None, repr=False)


def encode_body(body: Any) -> Optional[bytes]:
    """
    Normalize a request body to bytes.

    Accepts bytes, str (UTF-8), a readable binary stream (read fully so that
    the request can be resent on retry) or a JSON-serializable dict/list.

    Raises:
        RequestBuildError: Body type is not supported or not serializable
    """
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")
    if hasattr(body, "read"):
        data = body.read()
        if isinstance(data, str):
            data = data.encode("utf-8")
        return data
    if isinstance(body, (dict, list)):
        try:
            return json.dumps(body).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise RequestBuildError(f"Request body is not JSON serializable: {e}") from e
    raise RequestBuildError(f"Unsupported request body type: {type(body).__name__}")


def build_headers(user_agent: str, token: str, has_body: bool) -> Dict[str, str]:
    """Headers sent with every API request."""
    headers = {
        "User-Agent": user_agent,
        "Authorization": f"Bearer {token}",
    }
    if has_body:
        headers["Content-Type"] = JSON_CONTENT_TYPE
    return headers
