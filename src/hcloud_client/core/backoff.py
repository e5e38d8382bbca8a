"""
Backoff функции для retry при rate limit.

BackoffFunc получает количество уже выполненных повторов (при первом
вызове 0) и возвращает время ожидания в секундах.
"""

from typing import Callable

BackoffFunc = Callable[[int], float]


def constant_backoff(duration: float) -> BackoffFunc:
    """
    Постоянная задержка.

    Args:
        duration: Задержка (сек), одинаковая для любого номера повтора

    Examples:
        >>> backoff = constant_backoff(1.5)
        >>> backoff(0), backoff(10)
        (1.5, 1.5)
    """
    if duration < 0:
        raise ValueError("duration must be non-negative")

    def backoff(retries: int) -> float:
        return duration

    return backoff


def exponential_backoff(base: float, duration: float) -> BackoffFunc:
    """
    Экспоненциальная задержка по формуле ``duration * base ** retries``.

    Без jitter и без верхней границы: вызывающий код сам отвечает за
    разумные значения base/duration.

    Args:
        base: Основание степени
        duration: Задержка для retries=0 (сек)

    Examples:
        >>> backoff = exponential_backoff(2, 0.5)
        >>> [backoff(i) for i in range(4)]
        [0.5, 1.0, 2.0, 4.0]
    """
    if base <= 0:
        raise ValueError("base must be positive")
    if duration < 0:
        raise ValueError("duration must be non-negative")

    def backoff(retries: int) -> float:
        return duration * (base ** retries)

    return backoff
