"""Registry Dashboard - web UI and API for operating a Docker registry."""

__version__ = "0.1.0"

from .config import DashboardConfig
from .core.registry_client import RegistryClient
from .core.runner import CommandRunner
from .core.sessions import SessionRegistry
from .exceptions import (
    CommandLaunchError,
    ConfigError,
    DashboardError,
    DeleteFailed,
    ManifestError,
    ManifestNotFound,
    RegistryConnectionError,
    RegistryError,
    ValidationError,
)
from .push import PushOrchestrator, build_push_commands, format_push_commands
from .registry import delete_image
from .server import create_app

__all__ = [
    "CommandLaunchError",
    "CommandRunner",
    "ConfigError",
    "DashboardConfig",
    "DashboardError",
    "DeleteFailed",
    "ManifestError",
    "ManifestNotFound",
    "PushOrchestrator",
    "RegistryClient",
    "RegistryConnectionError",
    "RegistryError",
    "SessionRegistry",
    "ValidationError",
    "build_push_commands",
    "create_app",
    "delete_image",
    "format_push_commands",
]
