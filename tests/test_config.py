"""Tests for environment configuration."""

from pathlib import Path

import pytest

from registry_dashboard.config import DEFAULT_STATIC_DIR, DashboardConfig
from registry_dashboard.exceptions import ConfigError


def test_defaults():
    config = DashboardConfig.from_env({})

    assert config.registry_host == "localhost:5000"
    assert config.registry_url == "http://localhost:5000"
    assert config.port == 3000
    assert config.docker_bin == "docker"
    assert config.command_timeout == 1800
    assert config.static_dir == DEFAULT_STATIC_DIR
    assert config.log_level == "INFO"


def test_registry_url_follows_host():
    """The proxy target defaults to the push destination host."""
    config = DashboardConfig.from_env({"REGISTRY_HOST": "registry.lan:5001"})

    assert config.registry_host == "registry.lan:5001"
    assert config.registry_url == "http://registry.lan:5001"


def test_overrides():
    config = DashboardConfig.from_env(
        {
            "REGISTRY_HOST": "registry.lan:5001/",
            "REGISTRY_URL": "https://registry.lan/",
            "PORT": "8080",
            "DOCKER_BIN": "/usr/local/bin/docker",
            "COMMAND_TIMEOUT": "0",
            "REQUEST_TIMEOUT": "5",
            "STREAM_HEARTBEAT": "2.5",
            "STATIC_DIR": "/srv/ui",
            "CORS_ORIGIN": "",
            "LOG_LEVEL": "debug",
        }
    )

    assert config.registry_host == "registry.lan:5001"
    assert config.registry_url == "https://registry.lan"
    assert config.port == 8080
    assert config.docker_bin == "/usr/local/bin/docker"
    assert config.command_timeout is None
    assert config.request_timeout == 5
    assert config.stream_heartbeat == 2.5
    assert config.static_dir == Path("/srv/ui")
    assert config.cors_origin == ""
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("name", ["PORT", "COMMAND_TIMEOUT", "REQUEST_TIMEOUT"])
def test_invalid_numbers(name):
    with pytest.raises(ConfigError, match=name):
        DashboardConfig.from_env({name: "soon"})


@pytest.mark.parametrize(
    "name, value",
    [
        ("PORT", "-5"),
        ("PORT", "0"),
        ("REQUEST_TIMEOUT", "0"),
        ("STREAM_HEARTBEAT", "0"),
        ("STREAM_HEARTBEAT", "-1.5"),
    ],
)
def test_non_positive_values_rejected(name, value):
    """A zero heartbeat would spin the stream loop; zero or negative values fail early."""
    with pytest.raises(ConfigError, match=name):
        DashboardConfig.from_env({name: value})


def test_packaged_ui_bundle_exists():
    assert (DEFAULT_STATIC_DIR / "index.html").is_file()
