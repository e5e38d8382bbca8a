"""
Logging examples: colored console output and JSON file logs.

The API token never appears in the logs.
"""

import os

from hcloud_client import ClientConfig, HCloudClient
from hcloud_client.core.logging import LoggingConfig


def example_colored_console():
    """Colored console output at DEBUG level."""
    print("\n" + "=" * 60)
    print("EXAMPLE 1: Colored console")
    print("=" * 60 + "\n")

    config = ClientConfig.create(
        token=os.environ.get("HCLOUD_TOKEN", ""),
        logging=LoggingConfig.create(level="DEBUG", format="colored"),
    )

    with HCloudClient(config=config) as client:
        client.do(client.new_request("GET", "/locations"))


def example_json_file():
    """JSON logs in a rotating file with static fields."""
    print("\n" + "=" * 60)
    print("EXAMPLE 2: JSON file logging")
    print("=" * 60 + "\n")

    logging_config = LoggingConfig.create(
        level="INFO",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path="logs/hcloud.log",
        extra_fields={"service": "inventory-sync", "environment": "production"},
    )
    config = ClientConfig.create(token=os.environ.get("HCLOUD_TOKEN", ""), logging=logging_config)

    with HCloudClient(config=config) as client:
        client.collect_all("/server_types", "server_types")

    print("Logs written to logs/hcloud.log")


if __name__ == "__main__":
    example_colored_console()
    example_json_file()
