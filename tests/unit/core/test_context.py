"""Tests for RequestContext."""

import asyncio
import threading
import time

import pytest

from hcloud_client.core.context import CANCEL_POLL_INTERVAL, RequestContext


def test_new_context_is_not_done():
    ctx = RequestContext()
    assert not ctx.cancelled
    assert not ctx.expired
    assert ctx.remaining() is None


def test_cancel():
    ctx = RequestContext()
    ctx.cancel()
    ctx.cancel()
    assert ctx.cancelled
    assert ctx.done


def test_deadline():
    ctx = RequestContext(timeout=0)
    assert ctx.expired
    assert ctx.remaining() == 0


def test_unique_request_ids():
    assert RequestContext().request_id != RequestContext().request_id


def test_wait_full_duration():
    ctx = RequestContext()
    assert ctx.wait(0.01) is False


def test_wait_interrupted_by_cancel():
    ctx = RequestContext()
    threading.Timer(0.05, ctx.cancel).start()

    start = time.monotonic()
    assert ctx.wait(10) is True
    assert time.monotonic() - start < 5


def test_wait_bounded_by_deadline():
    ctx = RequestContext(timeout=0.05)
    start = time.monotonic()
    assert ctx.wait(10) is True
    assert time.monotonic() - start < 5


def test_negative_timeout():
    with pytest.raises(ValueError):
        RequestContext(timeout=-1)


@pytest.mark.asyncio
async def test_async_wait_full_duration():
    assert await RequestContext().async_wait(0.01) is False


@pytest.mark.asyncio
async def test_async_wait_interrupted_by_cancel():
    ctx = RequestContext()
    asyncio.get_running_loop().call_later(0.05, ctx.cancel)

    start = time.monotonic()
    assert await ctx.async_wait(10) is True
    assert time.monotonic() - start < 1


@pytest.mark.asyncio
async def test_async_wait_bounded_by_deadline():
    ctx = RequestContext(timeout=0.05)
    start = time.monotonic()
    assert await ctx.async_wait(10) is True
    assert time.monotonic() - start < 1


def test_poll_interval_bounded_by_deadline():
    assert RequestContext().poll_interval() == CANCEL_POLL_INTERVAL
    assert RequestContext(timeout=0).poll_interval() == 0
