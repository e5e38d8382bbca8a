"""Тесты конфигурации."""

import dataclasses

import pytest

from hcloud_client.core.backoff import constant_backoff
from hcloud_client.core.config import (
    ClientConfig,
    DEFAULT_ENDPOINT,
    LIBRARY_VERSION,
    ListOpts,
    TimeoutConfig,
    USER_AGENT,
    build_user_agent,
)


class TestUserAgent:
    def test_library_part(self):
        assert USER_AGENT == f"hcloud-go/{LIBRARY_VERSION}"

    def test_app_name_and_version(self):
        assert build_user_agent("foo", "1.0") == f"foo/1.0 hcloud-go/{LIBRARY_VERSION}"

    def test_app_name_only(self):
        assert build_user_agent("foo", "") == f"foo hcloud-go/{LIBRARY_VERSION}"

    def test_no_application(self):
        assert build_user_agent("", "") == f"hcloud-go/{LIBRARY_VERSION}"

    def test_version_without_name_is_ignored(self):
        assert build_user_agent("", "1.0") == USER_AGENT

    def test_config_derives_user_agent(self):
        config = ClientConfig().with_application("foo", "1.0")
        assert config.user_agent == f"foo/1.0 {USER_AGENT}"

    def test_user_agent_not_settable(self):
        with pytest.raises(TypeError):
            ClientConfig(user_agent="custom")


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig()
        assert config.endpoint == DEFAULT_ENDPOINT
        assert config.token == ""
        assert config.poll_interval == 0.5
        assert config.max_retries is None
        assert config.backoff(0) == 0.5
        assert config.backoff(1) == 1.0

    def test_endpoint_trailing_slashes_trimmed(self):
        config = ClientConfig(endpoint="https://api.example.com/v1///")
        assert config.endpoint == "https://api.example.com/v1"

    def test_with_endpoint_trims(self):
        config = ClientConfig().with_endpoint("https://other.example.com/")
        assert config.endpoint == "https://other.example.com"

    def test_frozen(self):
        config = ClientConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.token = "x"

    def test_with_methods_return_copies(self):
        config = ClientConfig()
        backoff = constant_backoff(1)
        new = (
            config.with_token("secret")
            .with_poll_interval(2)
            .with_backoff(backoff)
            .with_max_retries(3)
        )
        assert config.token == ""
        assert new.token == "secret"
        assert new.poll_interval == 2
        assert new.backoff is backoff
        assert new.max_retries == 3

    def test_create(self):
        config = ClientConfig.create(
            endpoint="https://api.example.com/",
            token="secret",
            timeout=(3, 60),
            application_name="app",
        )
        assert config.endpoint == "https://api.example.com"
        assert config.timeout == TimeoutConfig(connect=3, read=60)
        assert config.user_agent.startswith("app hcloud-go/")

    def test_create_default_endpoint(self):
        assert ClientConfig.create().endpoint == DEFAULT_ENDPOINT

    def test_validation(self):
        with pytest.raises(ValueError):
            ClientConfig(poll_interval=-1)
        with pytest.raises(ValueError):
            ClientConfig(max_retries=-1)
        with pytest.raises(ValueError):
            TimeoutConfig(connect=0)


class TestListOpts:
    def test_empty(self):
        assert ListOpts(page=0, per_page=0, label_selector="").to_query() == ""
        assert ListOpts().values() == {}

    def test_page_only(self):
        assert ListOpts(page=2).to_query() == "page=2"

    def test_all_fields(self):
        opts = ListOpts(page=3, per_page=50, label_selector="env=prod,tier!=db")
        assert opts.values() == {
            "page": "3",
            "per_page": "50",
            "label_selector": "env=prod,tier!=db",
        }
        assert opts.to_query() == "page=3&per_page=50&label_selector=env%3Dprod%2Ctier%21%3Ddb"

    def test_per_page_only(self):
        assert ListOpts(per_page=25).to_query() == "per_page=25"
