"""Value types shared by the upgrade pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from .errors import UpgradeError

FALSY_STRINGS = frozenset({"", "false", "0", "no", "n", "null", "undefined"})


def is_falsy_string(value: object) -> bool:
    """Return True for values that should be read as "not provided".

    Update data reports ``false`` for components with no newer release, and
    prompt answers arrive as strings, so textual falsy values count too.
    """
    if value is None or value is False:
        return True
    return str(value).strip().lower() in FALSY_STRINGS


class UpgradeMode(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"


class UpgradeStatus(str, Enum):
    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"
    FAILED = "failed"


class MigrationState(str, Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class UpdateRequest:
    """Revisions to move each component to; ``None`` skips the component."""

    authoring_tool_revision: Optional[str] = None
    framework_revision: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return is_falsy_string(self.authoring_tool_revision) and is_falsy_string(
            self.framework_revision
        )


@dataclass(frozen=True)
class UpdateTarget:
    name: str
    repository_url: str
    revision: str
    directory: Path


@dataclass
class MigrationRecord:
    name: str
    state: MigrationState = MigrationState.DOWN
    created_at: Optional[datetime] = None

    @property
    def is_up(self) -> bool:
        return self.state == MigrationState.UP


@dataclass
class UpgradeResult:
    """Outcome of one orchestrator run."""

    status: UpgradeStatus
    request: Optional[UpdateRequest] = None
    migrations_applied: list[str] = field(default_factory=list)
    error: Optional[UpgradeError] = None

    @property
    def success(self) -> bool:
        return self.status != UpgradeStatus.FAILED

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1


__all__ = [
    "FALSY_STRINGS",
    "is_falsy_string",
    "UpgradeMode",
    "UpgradeStatus",
    "MigrationState",
    "UpdateRequest",
    "UpdateTarget",
    "MigrationRecord",
    "UpgradeResult",
]
