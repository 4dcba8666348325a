"""Upgrade command implementation for the authoring tool CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from authoring_upgrade.cli.ui import StepTracker, ask_revision, ask_yes_no
from authoring_upgrade.core.config import Configuration
from authoring_upgrade.core.constants import FRAMEWORK_NAME, PRODUCT_NAME
from authoring_upgrade.core.dependencies import (
    DependencyReport,
    check_primary_dependencies,
    check_secondary_dependencies,
)
from authoring_upgrade.core.errors import ConfigurationError, MissingDependencyError
from authoring_upgrade.core.models import UpdateRequest, UpgradeMode, UpgradeResult
from authoring_upgrade.migrations.service import MigrationService
from authoring_upgrade.orchestrator import UpgradeOrchestrator
from authoring_upgrade.repository import RepositoryUpdater
from authoring_upgrade.updates import UpdateChecker

logger = logging.getLogger(__name__)

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def load_configuration(server_root: Path) -> Configuration:
    try:
        return Configuration.load(server_root)
    except ConfigurationError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)


def build_orchestrator(
    configuration: Configuration,
    secondary: DependencyReport,
    tracker: StepTracker | None = None,
) -> UpgradeOrchestrator:
    """Wire the real collaborators; npm installs run only when npm exists."""
    has_npm = "npm" in secondary.versions
    return UpgradeOrchestrator(
        configuration,
        update_checker=UpdateChecker(configuration),
        authoring_updater=RepositoryUpdater(
            ["npm", "install", "--production"] if has_npm else None
        ),
        framework_updater=RepositoryUpdater(["npm", "install"] if has_npm else None),
        migrations=MigrationService(configuration),
        console=console,
        error_console=err_console,
        tracker=tracker,
    )


def collect_input(
    *,
    interactive: bool,
    proceed: Optional[bool],
    automatic: Optional[bool],
    authoring_tool_revision: Optional[str],
    framework_revision: Optional[str],
) -> tuple[UpgradeMode, UpdateRequest | None] | None:
    """Return the mode and request to run, or None when the user declined."""
    if interactive:
        console.print(
            f"\nThis script will update the {PRODUCT_NAME} and/or {FRAMEWORK_NAME}. "
            "Would you like to continue?"
        )
        if not ask_yes_no("Continue?"):
            return None
        automatic = ask_yes_no("Update automatically?")
        console.print()
        if automatic:
            return UpgradeMode.AUTOMATIC, None
        authoring_tool_revision = ask_revision(
            "Specific git revision to be used for the authoring tool. "
            "Accepts any valid revision type (e.g. branch/tag/commit)"
        )
        framework_revision = ask_revision(
            "Specific git revision to be used for the framework. "
            "Accepts any valid revision type (e.g. branch/tag/commit)"
        )
        console.print()
        return UpgradeMode.MANUAL, UpdateRequest(
            authoring_tool_revision=authoring_tool_revision or None,
            framework_revision=framework_revision or None,
        )

    if proceed is False:
        return None
    if automatic is None:
        # Explicit revisions imply a manual upgrade.
        automatic = not (authoring_tool_revision or framework_revision)
    if automatic:
        return UpgradeMode.AUTOMATIC, None
    return UpgradeMode.MANUAL, UpdateRequest(
        authoring_tool_revision=authoring_tool_revision or None,
        framework_revision=framework_revision or None,
    )


def run_upgrade(
    *,
    server_root: Path,
    interactive: bool,
    proceed: Optional[bool] = None,
    automatic: Optional[bool] = None,
    authoring_tool_revision: Optional[str] = None,
    framework_revision: Optional[str] = None,
) -> UpgradeResult | None:
    """Run the whole upgrade; raises ``typer.Exit`` with the process status."""
    if automatic and (authoring_tool_revision or framework_revision):
        raise typer.BadParameter(
            "revisions cannot be combined with --auto; use --manual or omit --auto",
            param_hint="--auto",
        )

    try:
        check_primary_dependencies().raise_for_errors()
    except MissingDependencyError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    configuration = load_configuration(server_root)

    secondary = check_secondary_dependencies()
    for issue in secondary.errors:
        logger.warning("%s %s", issue.message, issue.remediation)

    try:
        configuration.ensure_repo_values()
    except ConfigurationError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    selection = collect_input(
        interactive=interactive,
        proceed=proceed,
        automatic=automatic,
        authoring_tool_revision=authoring_tool_revision,
        framework_revision=framework_revision,
    )
    if selection is None:
        raise typer.Exit(0)
    mode, request = selection

    tracker = StepTracker("Upgrade")
    orchestrator = build_orchestrator(configuration, secondary, tracker)
    result = orchestrator.run(mode, request)

    if result.request is not None:
        console.print()
        console.print(tracker.render())
    if result.exit_code != 0:
        raise typer.Exit(result.exit_code)
    return result


__all__ = ["build_orchestrator", "err_console", "collect_input", "load_configuration", "run_upgrade"]
