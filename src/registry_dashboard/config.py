"""Dashboard configuration loaded from environment variables."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .exceptions import ConfigError

DEFAULT_STATIC_DIR = Path(__file__).parent / "static"


def _number(env: Mapping[str, str], name: str, default: str, cast=float):
    raw = env.get(name, default)
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def _positive(env: Mapping[str, str], name: str, default: str, cast=float):
    value = _number(env, name, default, cast)
    if value <= 0:
        raise ConfigError(f"{name} must be greater than zero, got {value!r}")
    return value


@dataclass(frozen=True)
class DashboardConfig:
    """Runtime settings for the dashboard server."""

    registry_host: str = "localhost:5000"
    registry_url: str = "http://localhost:5000"
    host: str = "0.0.0.0"
    port: int = 3000
    docker_bin: str = "docker"
    command_timeout: float | None = 1800
    request_timeout: int = 30
    stream_heartbeat: float = 15
    static_dir: Path = DEFAULT_STATIC_DIR
    cors_origin: str = "*"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "DashboardConfig":
        """Build a configuration from environment variables.

        Args:
            env: Mapping to read from (defaults to os.environ)

        Raises:
            ConfigError: If a numeric variable cannot be parsed, or PORT,
                REQUEST_TIMEOUT or STREAM_HEARTBEAT is not positive
        """
        env = os.environ if env is None else env

        registry_host = env.get("REGISTRY_HOST", "localhost:5000").strip().rstrip("/")
        registry_url = env.get("REGISTRY_URL") or f"http://{registry_host}"
        command_timeout = _number(env, "COMMAND_TIMEOUT", "1800")

        return cls(
            registry_host=registry_host,
            registry_url=registry_url.rstrip("/"),
            host=env.get("HOST", "0.0.0.0"),
            port=_positive(env, "PORT", "3000", int),
            docker_bin=env.get("DOCKER_BIN", "docker"),
            command_timeout=command_timeout if command_timeout > 0 else None,
            request_timeout=_positive(env, "REQUEST_TIMEOUT", "30", int),
            stream_heartbeat=_positive(env, "STREAM_HEARTBEAT", "15"),
            static_dir=Path(env.get("STATIC_DIR") or DEFAULT_STATIC_DIR),
            cors_origin=env.get("CORS_ORIGIN", "*"),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
