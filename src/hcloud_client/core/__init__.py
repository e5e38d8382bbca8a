"""Core модули: конфигурация, запрос, ответ, ошибки, retry, пагинация."""

from .backoff import BackoffFunc, constant_backoff, exponential_backoff
from .config import (
    ClientConfig,
    TimeoutConfig,
    ConnectionPoolConfig,
    ListOpts,
    DEFAULT_ENDPOINT,
    USER_AGENT,
    build_user_agent,
)
from .context import RequestContext
from .request import Request
from .response import Response, Meta, Pagination, RateLimit
from .exceptions import (
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
    ErrorDetails,
    InvalidInputDetails,
    InvalidInputField,
    TooManyRetriesError,
)
from .error_handler import ErrorHandler
from .retry_engine import RetryEngine
from .pagination import all_pages, iter_pages, async_all_pages
from .transport import SessionTransport
from .http_client import HCloudClient

__all__ = [
    # Backoff
    "BackoffFunc",
    "constant_backoff",
    "exponential_backoff",
    # Config
    "ClientConfig",
    "TimeoutConfig",
    "ConnectionPoolConfig",
    "ListOpts",
    "DEFAULT_ENDPOINT",
    "USER_AGENT",
    "build_user_agent",
    # Request / Response
    "RequestContext",
    "Request",
    "Response",
    "Meta",
    "Pagination",
    "RateLimit",
    # Core
    "HCloudClient",
    "ErrorHandler",
    "RetryEngine",
    "SessionTransport",
    "all_pages",
    "iter_pages",
    "async_all_pages",
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
    "ErrorDetails",
    "InvalidInputDetails",
    "InvalidInputField",
    "TooManyRetriesError",
]
