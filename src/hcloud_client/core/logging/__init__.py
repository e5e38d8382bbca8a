"""
Logging for the Hetzner Cloud client.

Example:
    >>> from hcloud_client import HCloudClient, ClientConfig
    >>> from hcloud_client.core.logging import LoggingConfig
    >>>
    >>> config = ClientConfig.create(
    ...     token="secret",
    ...     logging=LoggingConfig.create(level="DEBUG", format="json"),
    ... )
    >>> client = HCloudClient(config=config)
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import HCloudLogger
from .formatters import JSONFormatter, TextFormatter, ColoredFormatter, get_formatter
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    set_correlation_id,
    get_correlation_id,
    reset_correlation_id,
)
from .handlers import create_console_handler, create_file_handler

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "HCloudLogger",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    # Filters
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "set_correlation_id",
    "get_correlation_id",
    "reset_correlation_id",
    # Handlers
    "create_console_handler",
    "create_file_handler",
]
