"""Custom exceptions for the registry dashboard."""


class DashboardError(Exception):
    """Base exception for all dashboard errors."""

    pass


class ConfigError(DashboardError):
    """Raised when configuration values cannot be parsed."""

    pass


class ValidationError(DashboardError):
    """Raised when request input is missing or malformed."""

    pass


class CommandLaunchError(DashboardError):
    """Raised when an external command cannot be started."""

    pass


class RegistryError(DashboardError):
    """Base exception for all registry-related errors."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class RegistryConnectionError(RegistryError):
    """Raised when unable to connect to the registry."""

    pass


class ManifestError(RegistryError):
    """Raised when manifest operations fail."""

    pass


class ManifestNotFound(ManifestError):
    """Raised when a manifest digest cannot be resolved."""

    pass


class DeleteFailed(ManifestError):
    """Raised when the registry does not accept a manifest delete."""

    pass
