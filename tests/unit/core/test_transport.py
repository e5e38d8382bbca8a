"""Tests for the thread-local session transport."""

import threading

import requests

from hcloud_client.core.config import ConnectionPoolConfig
from hcloud_client.core.transport import SessionTransport, default_session_factory


def test_same_session_within_thread():
    with SessionTransport() as transport:
        assert transport.session is transport.session
        assert transport.active_sessions_count() == 1


def test_session_per_thread():
    transport = SessionTransport()
    sessions = []

    def worker():
        sessions.append(transport.session)

    threads = [threading.Thread(target=worker) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len({id(s) for s in sessions}) == 3
    transport.close()


def test_adapter_has_no_retries():
    session = default_session_factory(ConnectionPoolConfig(pool_connections=2, pool_maxsize=4))()
    adapter = session.get_adapter("https://api.example.com")

    assert adapter.max_retries.total == 0
    assert adapter._pool_maxsize == 4
    session.close()


def test_close_is_idempotent():
    transport = SessionTransport()
    _ = transport.session
    transport.close()
    transport.close()
    assert transport.active_sessions_count() == 0


def test_custom_factory():
    created = []

    def factory():
        session = requests.Session()
        created.append(session)
        return session

    with SessionTransport(factory) as transport:
        assert transport.session is created[0]
