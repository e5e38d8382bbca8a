"""Hetzner Cloud API client - request pipeline with rate limit aware retries."""

import logging

from .core.config import LIBRARY_VERSION
from .core.http_client import HCloudClient

# Опциональный импорт AsyncHCloudClient (требует httpx)
try:
    from .async_client import AsyncHCloudClient
    _HAS_ASYNC = True
except ImportError:
    _HAS_ASYNC = False
    AsyncHCloudClient = None  # type: ignore
from .core.backoff import BackoffFunc, constant_backoff, exponential_backoff
from .core.config import (
    ClientConfig,
    TimeoutConfig,
    ConnectionPoolConfig,
    ListOpts,
    DEFAULT_ENDPOINT,
    USER_AGENT,
)
from .core.context import RequestContext
from .core.response import Response, Meta, Pagination, RateLimit
from .core.pagination import all_pages, iter_pages
from .core.exceptions import (
    HCloudException,
    TransportError,
    TimeoutError,
    ConnectionError,
    RequestCancelledError,
    DeadlineExceededError,
    RequestBuildError,
    MetaDecodeError,
    DecodeError,
    HTTPError,
    APIError,
    ErrorCode,
    InvalidInputDetails,
    InvalidInputField,
    TooManyRetriesError,
)

# Users can configure logging themselves using logging.getLogger('hcloud_client')
logging.getLogger('hcloud_client').addHandler(logging.NullHandler())

__version__ = LIBRARY_VERSION
__license__ = "MIT"

__all__ = [
    # Clients
    "HCloudClient",
    "AsyncHCloudClient",

    # Config
    "ClientConfig",
    "TimeoutConfig",
    "ConnectionPoolConfig",
    "ListOpts",
    "DEFAULT_ENDPOINT",
    "USER_AGENT",

    # Backoff
    "BackoffFunc",
    "constant_backoff",
    "exponential_backoff",

    # Request / Response
    "RequestContext",
    "Response",
    "Meta",
    "Pagination",
    "RateLimit",
    "all_pages",
    "iter_pages",

    # Exceptions
    "HCloudException",
    "TransportError",
    "TimeoutError",
    "ConnectionError",
    "RequestCancelledError",
    "DeadlineExceededError",
    "RequestBuildError",
    "MetaDecodeError",
    "DecodeError",
    "HTTPError",
    "APIError",
    "ErrorCode",
    "InvalidInputDetails",
    "InvalidInputField",
    "TooManyRetriesError",

    # Version
    "__version__",
]
