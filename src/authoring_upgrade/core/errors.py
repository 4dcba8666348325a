"""Exception hierarchy for the upgrade pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import UpdateTarget


class UpgradeError(RuntimeError):
    """Base exception for upgrade errors."""
    pass


class ConfigurationError(UpgradeError):
    """Raised when the configuration file cannot be read or written."""


class MissingDependencyError(UpgradeError):
    """A required external tool is not installed."""

    def __init__(self, tool: str, message: str | None = None):
        self.tool = tool
        super().__init__(message or f"Required dependency '{tool}' is not installed.")


class UnsupportedConfigurationError(UpgradeError):
    """Automatic upgrade requested while custom repositories are configured."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "Cannot perform an automatic upgrade when custom repositories are used."
        )


class InvalidInputError(UpgradeError):
    """Manual upgrade requested without any revision."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message or "Cannot update software if no revisions are specified."
        )


class UpdateFetchError(UpgradeError):
    """Remote update data could not be retrieved."""


class RepositoryUpdateError(UpgradeError):
    """A repository could not be moved to the requested revision.

    Carries the target that failed so callers can tell the authoring tool
    apart from the framework.
    """

    def __init__(self, target: "UpdateTarget", reason: str | None = None):
        self.target = target
        self.reason = reason
        message = (
            f"Failed to update {target.name} in {target.directory} "
            f"to '{target.revision}'"
        )
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MigrationError(UpgradeError):
    """A single migration failed to apply."""

    def __init__(self, name: str | None, reason: str | None = None):
        self.name = name
        self.reason = reason
        if name:
            message = f"Migration '{name}' failed"
        else:
            message = "Migrations could not be run"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


__all__ = [
    "UpgradeError",
    "ConfigurationError",
    "MissingDependencyError",
    "UnsupportedConfigurationError",
    "InvalidInputError",
    "UpdateFetchError",
    "RepositoryUpdateError",
    "MigrationError",
]
