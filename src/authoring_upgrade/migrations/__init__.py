"""Database migrations for the authoring tool."""

from __future__ import annotations

from .runner import MigrationRunner
from .service import MigrationConfig, MigrationService
from .store import MigrationStore

__all__ = [
    "MigrationConfig",
    "MigrationRunner",
    "MigrationService",
    "MigrationStore",
]
