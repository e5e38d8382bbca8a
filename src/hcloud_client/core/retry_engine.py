"""
Retry engine для повторов при исчерпании rate limit.

Включает:
- Решение о повторе (только APIError с кодом rate_limit_exceeded)
- Ожидание через BackoffFunc, прерываемое RequestContext
- Опциональный лимит повторов

Создаётся отдельно на каждый вызов, поэтому счётчик не разделяется
между потоками.
"""

import asyncio
import logging
from typing import Optional

from .backoff import BackoffFunc
from .context import RequestContext
from .error_handler import ErrorHandler
from .exceptions import DeadlineExceededError, RequestCancelledError

logger = logging.getLogger(__name__)


class RetryEngine:
    """
    Механизм retry для одного логического запроса.

    Examples:
        >>> engine = RetryEngine(exponential_backoff(2, 0.5))
        >>> if engine.should_retry(error):
        >>>     engine.wait(ctx)
        >>>     engine.increment()
    """

    def __init__(self, backoff: BackoffFunc, max_retries: Optional[int] = None):
        """
        Args:
            backoff: BackoffFunc
            max_retries: Лимит повторов (None = без ограничения)
        """
        self.backoff = backoff
        self.max_retries = max_retries
        self._attempt = 0

    def should_retry(self, error: Exception) -> bool:
        """
        Решить, повторять ли запрос.

        Повторяется только rate limit; транспортные и прочие ошибки API
        возвращаются вызывающему коду как есть.
        """
        return ErrorHandler.is_rate_limited(error)

    @property
    def exhausted(self) -> bool:
        """Лимит повторов исчерпан."""
        return self.max_retries is not None and self._attempt >= self.max_retries

    def get_wait_time(self) -> float:
        """Время ожидания (сек) для текущего номера повтора."""
        return max(0.0, float(self.backoff(self._attempt)))

    def wait(self, ctx: RequestContext, url: Optional[str] = None) -> float:
        """
        Подождать перед повтором (блокирует текущий поток).

        Ожидание прерывается сразу при отмене контекста или по deadline.

        Returns:
            Время ожидания (сек)

        Raises:
            RequestCancelledError: Контекст отменён
            DeadlineExceededError: Истёк deadline
        """
        wait_time = self.get_wait_time()
        logger.debug("Backing off %.3fs before retry %d", wait_time, self._attempt + 1)
        if ctx.wait(wait_time):
            if ctx.cancelled:
                raise RequestCancelledError("Request cancelled during backoff", url)
            raise DeadlineExceededError("Request deadline exceeded during backoff", url)
        return wait_time

    async def async_wait(self, ctx: Optional[RequestContext] = None, url: Optional[str] = None) -> float:
        """
        Асинхронное ожидание перед retry (async-версия).

        Не занимает поток. Прерывается отменой задачи asyncio, а также
        отменой контекста или его deadline (с задержкой не больше
        CANCEL_POLL_INTERVAL).

        Examples:
            >>> await engine.async_wait(ctx)
        """
        wait_time = self.get_wait_time()
        logger.debug("Backing off %.3fs before retry %d", wait_time, self._attempt + 1)

        if ctx is None:
            await asyncio.sleep(wait_time)
        elif await ctx.async_wait(wait_time):
            if ctx.cancelled:
                raise RequestCancelledError("Request cancelled during backoff", url)
            raise DeadlineExceededError("Request deadline exceeded during backoff", url)
        return wait_time

    def increment(self):
        """Увеличить счётчик попыток."""
        self._attempt += 1

    @property
    def attempt(self) -> int:
        """Количество выполненных повторов."""
        return self._attempt


def raise_if_done(ctx: RequestContext, url: Optional[str] = None) -> None:
    """Выбросить исключение, если контекст отменён или истёк."""
    if ctx.cancelled:
        raise RequestCancelledError("Request cancelled", url)
    if ctx.expired:
        raise DeadlineExceededError("Request deadline exceeded", url)
