"""Core configuration, errors and value types."""

from .config import Configuration
from .constants import (
    DEFAULT_FRAMEWORK_REPO,
    DEFAULT_SERVER_REPO,
    FRAMEWORK_FOLDER,
    PRODUCT_NAME,
)
from .errors import (
    ConfigurationError,
    InvalidInputError,
    MigrationError,
    MissingDependencyError,
    RepositoryUpdateError,
    UnsupportedConfigurationError,
    UpdateFetchError,
    UpgradeError,
)
from .models import (
    MigrationRecord,
    MigrationState,
    UpdateRequest,
    UpdateTarget,
    UpgradeMode,
    UpgradeResult,
    UpgradeStatus,
    is_falsy_string,
)

__all__ = [
    "Configuration",
    "DEFAULT_FRAMEWORK_REPO",
    "DEFAULT_SERVER_REPO",
    "FRAMEWORK_FOLDER",
    "PRODUCT_NAME",
    "ConfigurationError",
    "InvalidInputError",
    "MigrationError",
    "MissingDependencyError",
    "RepositoryUpdateError",
    "UnsupportedConfigurationError",
    "UpdateFetchError",
    "UpgradeError",
    "MigrationRecord",
    "MigrationState",
    "UpdateRequest",
    "UpdateTarget",
    "UpgradeMode",
    "UpgradeResult",
    "UpgradeStatus",
    "is_falsy_string",
]
