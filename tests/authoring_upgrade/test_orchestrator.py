"""Tests for the upgrade orchestrator pipeline."""

from __future__ import annotations

import pytest
from rich.console import Console

from authoring_upgrade.cli.ui import StepTracker
from authoring_upgrade.core.errors import (
    InvalidInputError,
    MigrationError,
    RepositoryUpdateError,
    UnsupportedConfigurationError,
    UpdateFetchError,
)
from authoring_upgrade.core.models import UpdateRequest, UpgradeMode, UpgradeStatus
from authoring_upgrade.orchestrator import UpgradeOrchestrator
from tests.fakes import FakeMigrations, FakeRunner, FakeUpdateChecker, FakeUpdater, make_records


@pytest.fixture()
def collaborators():
    return {
        "update_checker": FakeUpdateChecker(),
        "authoring_updater": FakeUpdater(),
        "framework_updater": FakeUpdater(),
        "migrations": FakeMigrations(),
    }


def _orchestrator(configuration, console, collaborators, tracker=None) -> UpgradeOrchestrator:
    return UpgradeOrchestrator(
        configuration, console=console, error_console=console, tracker=tracker, **collaborators
    )


def test_manual_mode_without_revisions_fails_without_side_effects(configuration, console, collaborators):
    orchestrator = _orchestrator(configuration, console, collaborators)

    result = orchestrator.run(UpgradeMode.MANUAL, UpdateRequest("", None))

    assert result.status == UpgradeStatus.FAILED
    assert isinstance(result.error, InvalidInputError)
    assert result.exit_code == 1
    assert collaborators["update_checker"].calls == 0
    assert collaborators["authoring_updater"].targets == []
    assert collaborators["framework_updater"].targets == []
    assert collaborators["migrations"].calls == []


def test_manual_mode_treats_false_strings_as_missing(configuration, console, collaborators):
    orchestrator = _orchestrator(configuration, console, collaborators)

    result = orchestrator.run(UpgradeMode.MANUAL, UpdateRequest("false", "  "))

    assert isinstance(result.error, InvalidInputError)


@pytest.mark.parametrize("key", ["authoringToolRepository", "frameworkRepository"])
def test_automatic_mode_rejects_custom_repositories(configuration, console, collaborators, key):
    configuration.set(key, "https://example.com/fork.git")
    orchestrator = _orchestrator(configuration, console, collaborators)

    result = orchestrator.run(UpgradeMode.AUTOMATIC)

    assert result.status == UpgradeStatus.FAILED
    assert isinstance(result.error, UnsupportedConfigurationError)
    assert collaborators["update_checker"].calls == 0
    assert "custom repositories" in console.export_text()


def test_automatic_mode_up_to_date_short_circuits(configuration, console, collaborators):
    orchestrator = _orchestrator(configuration, console, collaborators)

    result = orchestrator.run(UpgradeMode.AUTOMATIC)

    assert result.status == UpgradeStatus.UP_TO_DATE
    assert result.exit_code == 0
    assert collaborators["update_checker"].calls == 1
    assert collaborators["authoring_updater"].targets == []
    assert collaborators["framework_updater"].targets == []
    assert collaborators["migrations"].calls == []
    assert "already up-to-date" in console.export_text()


def test_automatic_mode_uses_fetched_revisions(configuration, console, collaborators):
    collaborators["update_checker"].data = UpdateRequest("v0.11.0", "v5.8.0")
    orchestrator = _orchestrator(configuration, console, collaborators)

    result = orchestrator.run(UpgradeMode.AUTOMATIC)

    assert result.status == UpgradeStatus.UPDATED
    assert collaborators["authoring_updater"].targets[0].revision == "v0.11.0"
    assert collaborators["framework_updater"].targets[0].revision == "v5.8.0"
    assert "Software updates found." in console.export_text()


def test_fetch_failure_becomes_update_fetch_error(configuration, console, collaborators):
    collaborators["update_checker"].error = ConnectionError("offline")
    orchestrator = _orchestrator(configuration, console, collaborators)

    result = orchestrator.run(UpgradeMode.AUTOMATIC)

    assert isinstance(result.error, UpdateFetchError)
    assert "offline" in str(result.error)
    assert collaborators["authoring_updater"].targets == []


def test_authoring_only_revision_skips_framework(configuration, console, collaborators, server_root):
    orchestrator = _orchestrator(configuration, console, collaborators)

    result = orchestrator.run(UpgradeMode.MANUAL, UpdateRequest("v0.11.0", None))

    assert result.success
    [target] = collaborators["authoring_updater"].targets
    assert target.directory == server_root.resolve()
    assert target.repository_url == configuration.get("authoringToolRepository")
    assert collaborators["framework_updater"].targets == []
    assert collaborators["migrations"].calls == ["sync", "get_config", "create_runner"]


def test_framework_target_directory_is_under_tenant_temp(configuration, console, collaborators, server_root):
    orchestrator = _orchestrator(configuration, console, collaborators)

    orchestrator.run(UpgradeMode.MANUAL, UpdateRequest(None, "v5.8.0"))

    [target] = collaborators["framework_updater"].targets
    assert target.directory == server_root.resolve() / "temp" / "master" / "adapt_framework"
    assert collaborators["authoring_updater"].targets == []


def test_authoring_failure_stops_pipeline(configuration, console, collaborators):
    collaborators["authoring_updater"].error = RuntimeError("fetch failed")
    orchestrator = _orchestrator(configuration, console, collaborators)

    result = orchestrator.run(UpgradeMode.MANUAL, UpdateRequest("v0.11.0", "v5.8.0"))

    assert result.status == UpgradeStatus.FAILED
    assert isinstance(result.error, RepositoryUpdateError)
    assert result.error.target.name == "authoring tool"
    assert collaborators["framework_updater"].targets == []
    assert collaborators["migrations"].calls == []
    output = console.export_text()
    assert "Failed to update" in output
    assert "Upgrade was unsuccessful. Please check the console output." in output


def test_framework_failure_stops_before_migrations(configuration, console, collaborators):
    collaborators["framework_updater"].error = RuntimeError("checkout failed")
    orchestrator = _orchestrator(configuration, console, collaborators)

    result = orchestrator.run(UpgradeMode.MANUAL, UpdateRequest("v0.11.0", "v5.8.0"))

    assert result.error.target.name == "framework"
    assert len(collaborators["authoring_updater"].targets) == 1
    assert collaborators["migrations"].calls == []
    assert "Failed to upgrade temp/master/adapt_framework to v5.8.0" in console.export_text()


def test_pending_migrations_run_in_list_order(configuration, console, collaborators):
    runner = FakeRunner(make_records(("A", "up"), ("B", "down"), ("C", "down")))
    collaborators["migrations"] = FakeMigrations(runner)
    orchestrator = _orchestrator(configuration, console, collaborators)

    result = orchestrator.run(UpgradeMode.MANUAL, UpdateRequest("v0.11.0", None))

    assert runner.ran == [("up", "B"), ("up", "C")]
    assert result.migrations_applied == ["B", "C"]
    output = console.export_text()
    assert "Running B migration" in output
    assert "2 migrations ran successfully" in output


def test_single_migration_message_is_singular(configuration, console, collaborators):
    collaborators["migrations"] = FakeMigrations(FakeRunner(make_records(("A", "down"))))
    orchestrator = _orchestrator(configuration, console, collaborators)

    orchestrator.run(UpgradeMode.MANUAL, UpdateRequest("v0.11.0", None))

    assert "1 migration ran successfully" in console.export_text()


def test_migration_failure_aborts_remaining(configuration, console, collaborators):
    runner = FakeRunner(make_records(("A", "down"), ("B", "down"), ("C", "down")), fail_on="B")
    collaborators["migrations"] = FakeMigrations(runner)
    orchestrator = _orchestrator(configuration, console, collaborators)

    result = orchestrator.run(UpgradeMode.MANUAL, UpdateRequest("v0.11.0", None))

    assert result.status == UpgradeStatus.FAILED
    assert isinstance(result.error, MigrationError)
    assert result.error.name == "B"
    assert runner.ran == [("up", "A"), ("up", "B")]
    assert result.migrations_applied == ["A"]


def test_second_run_reports_no_migrations(configuration, console, collaborators):
    runner = FakeRunner(make_records(("A", "up"), ("B", "down")))
    collaborators["migrations"] = FakeMigrations(runner)
    orchestrator = _orchestrator(configuration, console, collaborators)
    request = UpdateRequest("v0.11.0", "v5.8.0")

    first = orchestrator.run(UpgradeMode.MANUAL, request)
    second = orchestrator.run(UpgradeMode.MANUAL, request)

    assert first.status == UpgradeStatus.UPDATED
    assert second.status == UpgradeStatus.UPDATED
    assert first.migrations_applied == ["B"]
    assert second.migrations_applied == []
    assert "No migrations to run" in console.export_text()


def test_tracker_reflects_step_outcomes(configuration, console, collaborators):
    tracker = StepTracker("Upgrade")
    orchestrator = _orchestrator(configuration, console, collaborators, tracker=tracker)

    orchestrator.run(UpgradeMode.MANUAL, UpdateRequest("v0.11.0", None))

    assert tracker.status_of("authoring") == "done"
    assert tracker.status_of("framework") == "skipped"
    assert tracker.status_of("migrations") == "done"


def test_failure_lines_go_to_error_console(configuration, console, collaborators):
    collaborators["authoring_updater"].error = RuntimeError("fetch failed")
    errors = Console(record=True, width=200, force_terminal=False, color_system=None)
    orchestrator = UpgradeOrchestrator(
        configuration, console=console, error_console=errors, **collaborators
    )

    orchestrator.run(UpgradeMode.MANUAL, UpdateRequest("v0.11.0"))

    error_output = errors.export_text()
    assert "Failed to update" in error_output
    assert "ERROR:" in error_output
    assert "Upgrade was unsuccessful" in error_output
    assert "Upgrade was unsuccessful" not in console.export_text()
