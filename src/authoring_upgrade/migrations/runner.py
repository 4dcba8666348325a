"""Apply database migrations found in a migrations directory."""

from __future__ import annotations

import importlib.util
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from types import ModuleType

from authoring_upgrade.core.errors import MigrationError
from authoring_upgrade.core.models import MigrationRecord, MigrationState

from .store import MigrationStore

logger = logging.getLogger(__name__)

# <epoch milliseconds>-<name>.py
MIGRATION_FILE_PATTERN = re.compile(r"^(?P<timestamp>\d+)-(?P<name>.+)\.py$")
DIRECTIONS = ("up", "down")


def parse_migration_filename(filename: str) -> tuple[str, datetime] | None:
    match = MIGRATION_FILE_PATTERN.match(filename)
    if not match:
        return None
    created_at = datetime.fromtimestamp(int(match.group("timestamp")) / 1000, tz=timezone.utc)
    return match.group("name"), created_at


class MigrationRunner:
    """List and run migrations, tracking their state in the database.

    Each migration is a Python file defining ``up(connection)`` and
    optionally ``down(connection)``; ``connection`` is a ``sqlite3``
    connection whose transaction also records the new state.
    """

    def __init__(
        self,
        migrations_path: Path,
        db_connection_uri: str,
        *,
        autosync: bool = True,
    ) -> None:
        self.migrations_path = Path(migrations_path)
        self.autosync = autosync
        self.store = MigrationStore(db_connection_uri)

    def _migration_files(self) -> dict[str, tuple[Path, datetime]]:
        files: dict[str, tuple[Path, datetime]] = {}
        if not self.migrations_path.is_dir():
            return files
        for path in sorted(self.migrations_path.glob("*.py")):
            parsed = parse_migration_filename(path.name)
            if parsed is None:
                logger.debug("Ignoring %s: not a migration file name", path.name)
                continue
            name, created_at = parsed
            if name in files:
                raise MigrationError(
                    name, f"duplicate migration files {files[name][0].name} and {path.name}"
                )
            files[name] = (path, created_at)
        return files

    def sync(self) -> list[str]:
        """Register migration files the database does not know yet."""
        known = self.store.names()
        added: list[str] = []
        for name, (_path, created_at) in self._migration_files().items():
            if name in known:
                continue
            self.store.add(name, created_at)
            added.append(name)
        if added:
            logger.info("Registered %d new migration(s): %s", len(added), ", ".join(added))
        return added

    def list(self) -> list[MigrationRecord]:
        """All migrations, oldest first."""
        if self.autosync:
            self.sync()
        return self.store.all()

    def _load(self, name: str, path: Path) -> ModuleType:
        module_name = "_authoring_migration_" + re.sub(r"\W", "_", name)
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise MigrationError(name, f"Cannot load {path}")
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            raise MigrationError(name, f"Cannot import {path.name}: {exc}") from exc
        return module

    def run(self, direction: str, name: str) -> None:
        """Run one migration in ``direction`` and record the resulting state."""
        if direction not in DIRECTIONS:
            raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")

        records = {record.name: record for record in self.store.all()}
        record = records.get(name)
        if record is None:
            raise MigrationError(name, "Unknown migration")
        target_state = MigrationState(direction)
        if record.state == target_state:
            logger.debug("Migration %s already %s", name, direction)
            return

        entry = self._migration_files().get(name)
        if entry is None:
            raise MigrationError(name, f"No file for migration in {self.migrations_path}")
        module = self._load(name, entry[0])
        handler = getattr(module, direction, None)
        if not callable(handler):
            raise MigrationError(name, f"Migration does not define {direction}()")

        try:
            with self.store.connect() as conn:
                handler(conn)
                self.store.set_state(name, target_state, conn=conn)
        except MigrationError:
            raise
        except Exception as exc:
            raise MigrationError(name, str(exc)) from exc
        logger.info("Migration %s is now %s", name, direction)


__all__ = ["DIRECTIONS", "MIGRATION_FILE_PATTERN", "MigrationRunner", "parse_migration_filename"]
