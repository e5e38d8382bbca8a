"""
Client configuration: backoff, application name, retry cap, cancellation.
"""

import os
import threading

from hcloud_client import (
    ClientConfig,
    HCloudClient,
    RequestCancelledError,
    RequestContext,
    TooManyRetriesError,
    constant_backoff,
)


def configured_client():
    config = (
        ClientConfig.create(token=os.environ.get("HCLOUD_TOKEN", ""), timeout=(5, 60))
        .with_application("inventory-sync", "2.3.0")
        .with_backoff(constant_backoff(1.0))
        .with_max_retries(10)
    )
    print(f"User-Agent: {config.user_agent}")
    return HCloudClient(config=config)


def cancel_from_other_thread(client):
    """Backoff waits wake up as soon as the context is cancelled."""
    ctx = RequestContext(timeout=30)
    threading.Timer(2.0, ctx.cancel).start()

    try:
        response = client.do(client.new_request("GET", "/servers", ctx=ctx))
        print(f"Status: {response.status_code}")
    except RequestCancelledError as e:
        print(f"Cancelled: {e}")
    except TooManyRetriesError as e:
        print(f"Gave up: {e}")


if __name__ == "__main__":
    with configured_client() as client:
        cancel_from_other_thread(client)
