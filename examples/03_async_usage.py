"""
AsyncHCloudClient: concurrent requests, backoff does not block the loop.

Requires: pip install hcloud-client-core[async]
"""

import asyncio
import os

from hcloud_client.async_client import AsyncHCloudClient


async def main():
    async with AsyncHCloudClient(token=os.environ.get("HCLOUD_TOKEN", "")) as client:
        servers, volumes = await asyncio.gather(
            client.collect_all("/servers", "servers"),
            client.collect_all("/volumes", "volumes"),
        )
        print(f"Servers: {len(servers)}, volumes: {len(volumes)}")


if __name__ == "__main__":
    asyncio.run(main())
