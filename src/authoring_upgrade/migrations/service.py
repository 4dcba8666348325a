"""Gather migration files and build a runner for the configured database."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import shutil

from authoring_upgrade.core.config import DB_CONNECTION_URI, MIGRATIONS_DIR, Configuration
from authoring_upgrade.core.errors import MigrationError

from .runner import MigrationRunner, parse_migration_filename
from .store import SQLITE_PREFIX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationConfig:
    migrations_dir: Path
    db_connection_uri: str


class MigrationService:
    """Migration sources are the server's ``migrations`` folder plus any
    ``plugins/*/migrations`` folder; they are copied into one directory the
    runner reads from.
    """

    def __init__(self, configuration: Configuration) -> None:
        self.configuration = configuration

    def source_dirs(self) -> list[Path]:
        root = self.configuration.server_root
        dirs = [root / "migrations"]
        plugins = root / "plugins"
        if plugins.is_dir():
            dirs.extend(sorted(p / "migrations" for p in plugins.iterdir() if p.is_dir()))
        return [d for d in dirs if d.is_dir()]

    def get_config(self) -> MigrationConfig:
        root = self.configuration.server_root
        migrations_dir = self.configuration.get(MIGRATIONS_DIR)
        if migrations_dir:
            migrations_path = Path(migrations_dir)
            if not migrations_path.is_absolute():
                migrations_path = root / migrations_path
        else:
            migrations_path = self.configuration.temp_dir / "migrations"

        uri = self.configuration.get_str(DB_CONNECTION_URI)
        if not uri:
            uri = f"{SQLITE_PREFIX}{root / 'data' / 'authoring.db'}"
        elif uri.startswith(SQLITE_PREFIX):
            db_path = uri[len(SQLITE_PREFIX):]
            if db_path and db_path != ":memory:" and not Path(db_path).is_absolute():
                uri = f"{SQLITE_PREFIX}{root / db_path}"
        return MigrationConfig(migrations_dir=migrations_path, db_connection_uri=uri)

    def sync(self) -> list[str]:
        """Copy migration files into the migrations directory; return their names."""
        target = self.get_config().migrations_dir
        try:
            target.mkdir(parents=True, exist_ok=True)
            names: list[str] = []
            for source in self.source_dirs():
                for path in sorted(source.glob("*.py")):
                    parsed = parse_migration_filename(path.name)
                    if parsed is None:
                        continue
                    destination = target / path.name
                    if destination.resolve() != path.resolve():
                        shutil.copy2(path, destination)
                    names.append(parsed[0])
        except OSError as exc:
            raise MigrationError(None, f"Failed to sync migrations into {target}: {exc}") from exc
        logger.debug("Synced %d migration file(s) into %s", len(names), target)
        return names

    def create_runner(self, config: MigrationConfig) -> MigrationRunner:
        return MigrationRunner(
            config.migrations_dir,
            config.db_connection_uri,
            autosync=True,
        )


__all__ = ["MigrationConfig", "MigrationService"]
