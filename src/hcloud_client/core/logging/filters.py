"""
Log filters: correlation id of the current API call and static extra fields.

The correlation id lives in a ``ContextVar`` so that it follows both
threads and asyncio tasks.
"""

import logging
from contextvars import ContextVar, Token
from typing import Dict, Any, Optional

_correlation_id: ContextVar[Optional[str]] = ContextVar("hcloud_correlation_id", default=None)


def set_correlation_id(correlation_id: Optional[str]) -> Token:
    """
    Set correlation id for the current thread/task.

    Returns:
        Token for :func:`reset_correlation_id`
    """
    return _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    """Correlation id of the current thread/task, or None."""
    return _correlation_id.get()


def reset_correlation_id(token: Token) -> None:
    """Restore the correlation id that was active before ``set_correlation_id``."""
    _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Adds ``correlation_id`` to records emitted during an API call."""

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        if correlation_id and not hasattr(record, "correlation_id"):
            record.correlation_id = correlation_id
        return True


class ExtraFieldsFilter(logging.Filter):
    """
    Adds static fields (service, environment, ...) to all records.

    Fields already present on the record are not overwritten.
    """

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = dict(extra_fields)

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
