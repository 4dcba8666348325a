"""Sequence the update of the authoring tool, the framework and the database."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol

from rich.console import Console

from authoring_upgrade.core.config import (
    AUTHORING_TOOL_REPOSITORY,
    FRAMEWORK_REPOSITORY,
    Configuration,
)
from authoring_upgrade.core.constants import FRAMEWORK_FOLDER, FRAMEWORK_NAME, PRODUCT_NAME
from authoring_upgrade.core.errors import (
    InvalidInputError,
    MigrationError,
    RepositoryUpdateError,
    UnsupportedConfigurationError,
    UpdateFetchError,
    UpgradeError,
)
from authoring_upgrade.core.models import (
    MigrationRecord,
    UpdateRequest,
    UpdateTarget,
    UpgradeMode,
    UpgradeResult,
    UpgradeStatus,
    is_falsy_string,
)

if TYPE_CHECKING:
    from authoring_upgrade.cli.ui import StepTracker
    from authoring_upgrade.migrations.service import MigrationConfig

logger = logging.getLogger(__name__)

AUTHORING_STEP = "authoring"
FRAMEWORK_STEP = "framework"
MIGRATIONS_STEP = "migrations"


class UpdateDataSource(Protocol):
    def get_update_data(self) -> Optional[UpdateRequest]: ...


class Updater(Protocol):
    def update(self, target: UpdateTarget) -> None: ...


class MigrationList(Protocol):
    def list(self) -> list[MigrationRecord]: ...

    def run(self, direction: str, name: str) -> None: ...


class MigrationSource(Protocol):
    def sync(self) -> list[str]: ...

    def get_config(self) -> "MigrationConfig": ...

    def create_runner(self, config: "MigrationConfig") -> MigrationList: ...


class UpgradeOrchestrator:
    """Run one upgrade: optional update check, two checkouts, migrations.

    Steps run strictly in order and the first failure ends the run; nothing
    already done is rolled back.
    """

    def __init__(
        self,
        configuration: Configuration,
        *,
        update_checker: UpdateDataSource,
        authoring_updater: Updater,
        framework_updater: Updater,
        migrations: MigrationSource,
        console: Console | None = None,
        error_console: Console | None = None,
        tracker: "StepTracker | None" = None,
    ) -> None:
        self.configuration = configuration
        self.update_checker = update_checker
        self.authoring_updater = authoring_updater
        self.framework_updater = framework_updater
        self.migrations = migrations
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)
        self.tracker = tracker
        if tracker is not None:
            tracker.add(AUTHORING_STEP, f"Update {PRODUCT_NAME}")
            tracker.add(FRAMEWORK_STEP, f"Update {FRAMEWORK_NAME}")
            tracker.add(MIGRATIONS_STEP, "Run database migrations")

    def _track(self, action: str, key: str, detail: str = "") -> None:
        if self.tracker is not None:
            getattr(self.tracker, action)(key, detail)

    def run(self, mode: UpgradeMode, request: UpdateRequest | None = None) -> UpgradeResult:
        applied: list[str] = []
        try:
            if mode == UpgradeMode.AUTOMATIC:
                request = self.check_for_updates()
                if request is None:
                    self.console.print(
                        "[green]Your software is already up-to-date, no need to upgrade.[/green]"
                    )
                    return UpgradeResult(status=UpgradeStatus.UP_TO_DATE)
            elif request is None or request.is_empty:
                raise InvalidInputError()

            self.update_authoring_tool(request.authoring_tool_revision)
            self.update_framework(request.framework_revision)
            self.run_migrations(applied)
        except UpgradeError as exc:
            logger.error("Upgrade failed: %s", exc)
            self.error_console.print(f"[red]ERROR:[/red] {exc}")
            self.error_console.print(
                "[bold red]Upgrade was unsuccessful. Please check the console output.[/bold red]"
            )
            return UpgradeResult(
                status=UpgradeStatus.FAILED,
                request=request,
                migrations_applied=applied,
                error=exc,
            )

        self.console.print(
            f"[bold green]Your {PRODUCT_NAME} was updated successfully.[/bold green]"
        )
        return UpgradeResult(
            status=UpgradeStatus.UPDATED,
            request=request,
            migrations_applied=applied,
        )

    def check_for_updates(self) -> Optional[UpdateRequest]:
        if self.configuration.uses_custom_repositories():
            raise UnsupportedConfigurationError()

        try:
            with self.console.status("Checking for updates"):
                data = self.update_checker.get_update_data()
        except UpdateFetchError:
            raise
        except Exception as exc:
            raise UpdateFetchError(f"Failed to check for updates: {exc}") from exc

        if data is None:
            return None
        self.console.print("[underline]Software updates found.[/underline]\n")
        return data

    def _update(self, updater: Updater, target: UpdateTarget) -> None:
        try:
            updater.update(target)
        except RepositoryUpdateError:
            raise
        except Exception as exc:
            raise RepositoryUpdateError(target, str(exc)) from exc

    def update_authoring_tool(self, revision: str | None) -> None:
        if is_falsy_string(revision):
            self._track("skip", AUTHORING_STEP, "no revision")
            return
        target = UpdateTarget(
            name="authoring tool",
            repository_url=self.configuration.get_str(AUTHORING_TOOL_REPOSITORY),
            revision=str(revision),
            directory=self.configuration.server_root,
        )
        self._track("start", AUTHORING_STEP, target.revision)
        try:
            self._update(self.authoring_updater, target)
        except RepositoryUpdateError:
            self.error_console.print(f"Failed to update {target.directory} to '{target.revision}'")
            self._track("error", AUTHORING_STEP, target.revision)
            raise
        self.console.print(f"{PRODUCT_NAME} upgraded to {target.revision}")
        self._track("complete", AUTHORING_STEP, target.revision)

    def update_framework(self, revision: str | None) -> None:
        if is_falsy_string(revision):
            self._track("skip", FRAMEWORK_STEP, "no revision")
            return
        target = UpdateTarget(
            name="framework",
            repository_url=self.configuration.get_str(FRAMEWORK_REPOSITORY),
            revision=str(revision),
            directory=self.configuration.framework_dir(FRAMEWORK_FOLDER),
        )
        self._track("start", FRAMEWORK_STEP, target.revision)
        try:
            self._update(self.framework_updater, target)
        except RepositoryUpdateError:
            self.error_console.print(
                f"Failed to upgrade {self._display_path(target.directory)} to {target.revision}"
            )
            self._track("error", FRAMEWORK_STEP, target.revision)
            raise
        self.console.print(f"{FRAMEWORK_NAME} upgraded to {target.revision}")
        self._track("complete", FRAMEWORK_STEP, target.revision)

    def _display_path(self, directory: Path) -> str:
        try:
            return str(directory.relative_to(self.configuration.server_root))
        except ValueError:
            return str(directory)

    def run_migrations(self, applied: list[str]) -> int:
        """Apply every migration not yet up; names are appended to ``applied``."""
        self._track("start", MIGRATIONS_STEP)
        try:
            self.migrations.sync()
            runner = self.migrations.create_runner(self.migrations.get_config())
            records = runner.list()
        except MigrationError:
            self._track("error", MIGRATIONS_STEP)
            raise
        except Exception as exc:
            self._track("error", MIGRATIONS_STEP)
            raise MigrationError(None, str(exc)) from exc

        for record in records:
            if record.is_up:
                continue
            self.console.print(f"Running {record.name} migration")
            try:
                runner.run("up", record.name)
            except Exception as exc:
                self._track("error", MIGRATIONS_STEP, record.name)
                if isinstance(exc, MigrationError):
                    raise
                raise MigrationError(record.name, str(exc)) from exc
            applied.append(record.name)

        count = len(applied)
        if count > 0:
            self.console.print(
                f"{count} migration{'s' if count > 1 else ''} ran successfully"
            )
            self._track("complete", MIGRATIONS_STEP, f"{count} applied")
        else:
            self.console.print("No migrations to run")
            self._track("complete", MIGRATIONS_STEP, "none pending")
        return count


__all__ = [
    "AUTHORING_STEP",
    "FRAMEWORK_STEP",
    "MIGRATIONS_STEP",
    "UpgradeOrchestrator",
]
