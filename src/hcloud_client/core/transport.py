# src/hcloud_client/core/transport.py
"""
Thread-safe HTTP transport for HCloudClient.

Each thread gets its own ``requests.Session`` (sessions are not documented
as thread-safe), all sharing the same pool settings. TLS, DNS and
connection pooling are left to requests/urllib3.
"""
import logging
import threading
import weakref
from typing import Callable, Optional, Set, Tuple, Union

import requests
from requests.adapters import HTTPAdapter

from .config import ConnectionPoolConfig

logger = logging.getLogger(__name__)

Timeout = Union[float, Tuple[float, float]]


def default_session_factory(pool: ConnectionPoolConfig) -> Callable[[], requests.Session]:
    """Session factory with a pooled adapter and no urllib3-level retries."""

    def factory() -> requests.Session:
        session = requests.Session()
        adapter = HTTPAdapter(
            pool_connections=pool.pool_connections,
            pool_maxsize=pool.pool_maxsize,
            max_retries=0  # Ретраи только через RetryEngine
        )
        session.mount('http://', adapter)
        session.mount('https://', adapter)
        return session

    return factory


class SessionTransport:
    """
    Sends prepared requests through thread-local ``requests.Session`` objects.

    Sessions are lazily created on first use per thread and tracked with
    weak references so that ``close()`` can close all of them.

    Example:
        >>> transport = SessionTransport()
        >>> raw = transport.send(prepared, timeout=(5, 30))
        >>> transport.close()
    """

    def __init__(self, session_factory: Optional[Callable[[], requests.Session]] = None):
        """
        Args:
            session_factory: Callable creating a configured Session
        """
        self._session_factory = session_factory or default_session_factory(ConnectionPoolConfig())
        self._local = threading.local()

        self._all_sessions: Set[weakref.ref] = set()
        self._sessions_lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        """Thread-local session, created lazily."""
        session = getattr(self._local, 'session', None)
        if session is None:
            session = self._session_factory()
            self._local.session = session

            with self._sessions_lock:
                self._all_sessions.add(weakref.ref(session, self._discard_ref))

        return session

    def _discard_ref(self, ref: weakref.ref):
        with self._sessions_lock:
            self._all_sessions.discard(ref)

    def send(self, prepared: requests.PreparedRequest, timeout: Timeout) -> requests.Response:
        """
        Send a prepared request. Transport exceptions propagate unchanged.

        The body is fetched eagerly (no streaming).
        """
        return self.session.send(prepared, timeout=timeout, stream=False, allow_redirects=True)

    def close(self):
        """
        Close all sessions from all threads. Safe to call multiple times.
        """
        self._local.session = None

        with self._sessions_lock:
            sessions = [ref() for ref in self._all_sessions]
            self._all_sessions.clear()

        for session in sessions:
            if session is None:
                continue
            try:
                session.close()
            except Exception as e:
                logger.debug("Error while closing session: %s", e)

    def active_sessions_count(self) -> int:
        """Number of sessions that are still alive."""
        with self._sessions_lock:
            return sum(1 for ref in self._all_sessions if ref() is not None)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
