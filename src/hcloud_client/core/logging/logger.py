"""
Client logger.

Thin wrapper around a stdlib logger that accepts structured keyword
fields and masks credentials before they reach any handler.
"""

import logging
from typing import Any, List, Optional

from .config import LoggingConfig, LogLevel
from .formatters import get_formatter
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .handlers import create_console_handler, create_file_handler
from ...utils.sanitizer import mask_sensitive_data


class HCloudLogger:
    """
    Structured logger used by the clients when ``ClientConfig.logging`` is set.

    Example:
        >>> logger = HCloudLogger(LoggingConfig.create(level="DEBUG"))
        >>> logger.info("Request completed", method="GET", status_code=200)
        >>> logger.close()
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = "hcloud_client"):
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False

        level = self._get_level(self.config.level)

        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._logger.propagate = False

        # Reinitialization replaces handlers of a previous instance
        for handler in self._logger.handlers[:]:
            self._logger.removeHandler(handler)

        filters: List[logging.Filter] = []
        if self.config.enable_correlation_id:
            filters.append(CorrelationIdFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        formatter = get_formatter(self.config.format.value)

        if self.config.enable_console:
            self._logger.addHandler(create_console_handler(level, formatter, filters))

        if self.config.enable_file and self.config.file_path:
            self._logger.addHandler(create_file_handler(
                file_path=self.config.file_path,
                level=level,
                formatter=formatter,
                max_bytes=self.config.max_bytes,
                backup_count=self.config.backup_count,
                filters=filters
            ))

    @staticmethod
    def _get_level(level: LogLevel) -> int:
        return getattr(logging, level.value)

    def _log(self, level: int, message: str, fields: Any) -> None:
        if self._closed:
            return
        self._logger.log(level, message, extra=mask_sensitive_data(fields))

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def close(self) -> None:
        """
        Flush and close all handlers. Idempotent.
        """
        if self._closed:
            return

        for handler in self._logger.handlers[:]:
            try:
                handler.flush()
                handler.close()
            finally:
                self._logger.removeHandler(handler)

        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
