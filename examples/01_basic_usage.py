"""
Basic Hetzner Cloud client usage.

Set HCLOUD_TOKEN before running.
"""

import os

from hcloud_client import APIError, HCloudClient, ListOpts


def get_server(client, server_id):
    """Fetch one server and print rate limit info."""
    print(f"\n=== GET /servers/{server_id} ===")

    request = client.new_request("GET", f"/servers/{server_id}")
    try:
        response, server = client.fetch_decoded(request, decoder=lambda body: body["server"])
    except APIError as e:
        print(f"API error: {e.code} - {e.message}")
        return

    print(f"Name: {server['name']}")
    print(f"Rate limit remaining: {response.meta.ratelimit.remaining}")


def list_servers(client):
    """Collect servers from all pages."""
    print("\n=== All servers ===")

    servers = client.collect_all("/servers", "servers", ListOpts(per_page=50))
    for server in servers:
        print(f"{server['id']}: {server['name']}")


def create_server(client):
    """POST with a JSON body."""
    print("\n=== Create server ===")

    request = client.new_request("POST", "/servers", body={
        "name": "example-1",
        "server_type": "cx22",
        "image": "ubuntu-24.04",
    })
    response, body = client.fetch_decoded(request)
    print(f"Status: {response.status_code}")
    print(f"Action: {body['action']['command']}")


if __name__ == "__main__":
    with HCloudClient(token=os.environ.get("HCLOUD_TOKEN", "")) as client:
        list_servers(client)
        get_server(client, 1)
