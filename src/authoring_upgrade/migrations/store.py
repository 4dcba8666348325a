"""SQLite storage for migration state."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from authoring_upgrade.core.errors import MigrationError
from authoring_upgrade.core.models import MigrationRecord, MigrationState

SQLITE_PREFIX = "sqlite:///"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS migrations (
    name TEXT PRIMARY KEY,
    state TEXT NOT NULL DEFAULT 'down',
    created_at TEXT NOT NULL
)
"""


def sqlite_path_from_uri(uri: str) -> str:
    """``sqlite:///data/app.db`` -> ``data/app.db``; bare paths pass through."""
    uri = uri.strip()
    if uri.startswith(SQLITE_PREFIX):
        return uri[len(SQLITE_PREFIX):] or ":memory:"
    if "://" in uri:
        raise MigrationError(None, f"Unsupported database connection URI: {uri}")
    return uri


class MigrationStore:
    """Migration rows kept next to the application data they migrate."""

    def __init__(self, db_connection_uri: str) -> None:
        self.db_connection_uri = db_connection_uri
        self.db_path = sqlite_path_from_uri(db_connection_uri)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._memory_conn: sqlite3.Connection | None = None
        with self.connect() as conn:
            conn.execute(_SCHEMA)

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection; commit on success, roll back on error."""
        if self.db_path == ":memory:":
            if self._memory_conn is None:
                self._memory_conn = sqlite3.connect(":memory:")
            conn = self._memory_conn
            owned = False
        else:
            conn = sqlite3.connect(self.db_path)
            owned = True
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            if owned:
                conn.close()

    def all(self) -> list[MigrationRecord]:
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT name, state, created_at FROM migrations ORDER BY created_at, name"
            ).fetchall()
        return [
            MigrationRecord(
                name=name,
                state=MigrationState(state),
                created_at=datetime.fromisoformat(created_at),
            )
            for name, state, created_at in rows
        ]

    def names(self) -> set[str]:
        with self.connect() as conn:
            return {row[0] for row in conn.execute("SELECT name FROM migrations")}

    def add(self, name: str, created_at: datetime | None = None) -> None:
        stamp = (created_at or datetime.now(timezone.utc)).isoformat()
        with self.connect() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO migrations (name, state, created_at) VALUES (?, ?, ?)",
                (name, MigrationState.DOWN.value, stamp),
            )

    def set_state(self, name: str, state: MigrationState, conn: sqlite3.Connection | None = None) -> None:
        if conn is not None:
            conn.execute("UPDATE migrations SET state = ? WHERE name = ?", (state.value, name))
            return
        with self.connect() as own:
            own.execute("UPDATE migrations SET state = ? WHERE name = ?", (state.value, name))


__all__ = ["MigrationStore", "SQLITE_PREFIX", "sqlite_path_from_uri"]
