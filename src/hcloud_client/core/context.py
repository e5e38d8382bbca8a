"""Request context: cancellation and deadline for a single API call."""

import asyncio
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

# How often async waits check the cancellation flag (sec)
CANCEL_POLL_INTERVAL = 0.05


@dataclass
class RequestContext:
    """Cancellation token bound to a request at build time.

    Cancelling the context aborts a pending send (checked before every
    attempt) and wakes up a backoff wait immediately. A deadline bounds
    the whole call, retries included.

    Attributes:
        timeout: Seconds from creation until the deadline (None = no deadline)
        request_id: Identifier used as correlation id in logs

    Example:
        >>> ctx = RequestContext(timeout=30)
        >>> request = client.new_request("GET", "/servers", ctx=ctx)
        >>> # from another thread:
        >>> ctx.cancel()
    """

    timeout: Optional[float] = None
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    _cancelled: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _deadline: Optional[float] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if self.timeout is not None:
            if self.timeout < 0:
                raise ValueError("timeout must be non-negative")
            self._deadline = time.monotonic() + self.timeout

    def cancel(self) -> None:
        """Cancel the context. Safe to call from any thread, idempotent."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        """True if the context was cancelled or its deadline passed."""
        return self.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline, None if there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def wait(self, seconds: float) -> bool:
        """
        Sleep up to ``seconds``, waking early on cancellation or deadline.

        Returns:
            True if the context is done (the caller must abort), False if the
            full wait elapsed.
        """
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._cancelled.wait(remaining)
            return True
        self._cancelled.wait(seconds)
        return self.done

    def poll_interval(self) -> float:
        """Next sleep slice for async waits, bounded by the deadline."""
        remaining = self.remaining()
        if remaining is None:
            return CANCEL_POLL_INTERVAL
        return min(CANCEL_POLL_INTERVAL, remaining)

    async def async_wait(self, seconds: float) -> bool:
        """
        Async version of :meth:`wait`.

        ``cancel()`` may come from any thread, so the flag is polled every
        ``CANCEL_POLL_INTERVAL`` seconds instead of awaiting the event.
        """
        end = time.monotonic() + seconds
        while not self.done:
            left = end - time.monotonic()
            if left <= 0:
                return False
            await asyncio.sleep(min(left, self.poll_interval()))
        return True
