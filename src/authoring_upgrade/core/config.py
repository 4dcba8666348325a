"""Server configuration stored in <server_root>/conf/config.yaml."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

from .constants import (
    CONFIG_DIR,
    CONFIG_FILENAME,
    DEFAULT_FRAMEWORK_REPO,
    DEFAULT_SERVER_REPO,
    TEMP_DIR,
)
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

AUTHORING_TOOL_REPOSITORY = "authoringToolRepository"
FRAMEWORK_REPOSITORY = "frameworkRepository"
MASTER_TENANT_ID = "masterTenantID"
DB_CONNECTION_URI = "dbConnectionUri"
MIGRATIONS_DIR = "migrationsDir"
GITHUB_TOKEN = "githubToken"


def config_path_for(server_root: Path) -> Path:
    return server_root / CONFIG_DIR / CONFIG_FILENAME


class Configuration:
    """Key/value settings for one authoring tool installation.

    Constructed once at startup and handed to every collaborator that needs
    it. Values are kept in the ruamel round-trip mapping so that saving
    preserves comments and key order of the original file.
    """

    def __init__(
        self,
        server_root: Path,
        values: dict[str, Any] | None = None,
        *,
        config_path: Path | None = None,
    ) -> None:
        self.server_root = Path(server_root).resolve()
        self.config_path = config_path or config_path_for(self.server_root)
        self._values: dict[str, Any] = values if values is not None else {}

    @classmethod
    def load(cls, server_root: Path, config_path: Path | None = None) -> "Configuration":
        """Load configuration from disk; a missing file yields empty settings."""
        server_root = Path(server_root).resolve()
        path = config_path or config_path_for(server_root)
        if not path.exists():
            logger.debug("No configuration file at %s", path)
            return cls(server_root, {}, config_path=path)

        yaml = YAML()
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = yaml.load(handle) or {}
        except Exception as exc:
            raise ConfigurationError(f"Failed to parse {path}: {exc}") from exc

        if not isinstance(payload, dict):
            raise ConfigurationError(f"{path} must contain a mapping of settings")
        return cls(server_root, payload, config_path=path)

    @property
    def temp_dir(self) -> Path:
        return self.server_root / TEMP_DIR

    def get(self, key: str, default: Any = None) -> Any:
        value = self._values.get(key)
        return default if value is None else value

    def get_str(self, key: str, default: str = "") -> str:
        value = self.get(key)
        if value is None:
            return default
        return str(value)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def save(self) -> None:
        """Persist settings, preserving any keys this tool does not know."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        yaml = YAML()
        yaml.preserve_quotes = True
        try:
            with self.config_path.open("w", encoding="utf-8") as handle:
                yaml.dump(self._values, handle)
        except OSError as exc:
            raise ConfigurationError(f"Failed to write {self.config_path}: {exc}") from exc

    def ensure_repo_values(self) -> bool:
        """Fill in default repository URLs for empty settings.

        Returns True when a value was written (and the file saved).
        """
        changed = False
        if not self.get_str(FRAMEWORK_REPOSITORY).strip():
            self.set(FRAMEWORK_REPOSITORY, DEFAULT_FRAMEWORK_REPO)
            changed = True
        if not self.get_str(AUTHORING_TOOL_REPOSITORY).strip():
            self.set(AUTHORING_TOOL_REPOSITORY, DEFAULT_SERVER_REPO)
            changed = True
        if changed:
            logger.info("Default repository URLs written to %s", self.config_path)
            self.save()
        return changed

    def uses_custom_repositories(self) -> bool:
        return (
            self.get_str(FRAMEWORK_REPOSITORY) != DEFAULT_FRAMEWORK_REPO
            or self.get_str(AUTHORING_TOOL_REPOSITORY) != DEFAULT_SERVER_REPO
        )

    def framework_dir(self, folder: str) -> Path:
        """Framework checkout directory for the master tenant."""
        return self.temp_dir / self.get_str(MASTER_TENANT_ID) / folder


__all__ = [
    "AUTHORING_TOOL_REPOSITORY",
    "FRAMEWORK_REPOSITORY",
    "MASTER_TENANT_ID",
    "DB_CONNECTION_URI",
    "MIGRATIONS_DIR",
    "GITHUB_TOKEN",
    "Configuration",
    "config_path_for",
]
