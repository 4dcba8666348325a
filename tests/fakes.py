"""Hand-written collaborators for orchestrator and CLI tests."""

from __future__ import annotations

from pathlib import Path

from authoring_upgrade.core.models import MigrationRecord, MigrationState, UpdateRequest, UpdateTarget
from authoring_upgrade.migrations.service import MigrationConfig


class FakeUpdateChecker:
    def __init__(self, data: UpdateRequest | None = None, error: Exception | None = None):
        self.data = data
        self.error = error
        self.calls = 0

    def get_update_data(self) -> UpdateRequest | None:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.data


class FakeUpdater:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.targets: list[UpdateTarget] = []

    def update(self, target: UpdateTarget) -> None:
        self.targets.append(target)
        if self.error is not None:
            raise self.error


class FakeRunner:
    def __init__(self, records: list[MigrationRecord], fail_on: str | None = None):
        self.records = records
        self.fail_on = fail_on
        self.ran: list[tuple[str, str]] = []

    def list(self) -> list[MigrationRecord]:
        return list(self.records)

    def run(self, direction: str, name: str) -> None:
        self.ran.append((direction, name))
        if name == self.fail_on:
            raise RuntimeError(f"boom in {name}")
        for record in self.records:
            if record.name == name:
                record.state = MigrationState(direction)


class FakeMigrations:
    def __init__(self, runner: FakeRunner | None = None):
        self.runner = runner or FakeRunner([])
        self.calls: list[str] = []

    def sync(self) -> list[str]:
        self.calls.append("sync")
        return [record.name for record in self.runner.records]

    def get_config(self) -> MigrationConfig:
        self.calls.append("get_config")
        return MigrationConfig(migrations_dir=Path("migrations"), db_connection_uri="sqlite:///:memory:")

    def create_runner(self, config: MigrationConfig) -> FakeRunner:
        self.calls.append("create_runner")
        return self.runner


def make_records(*pairs: tuple[str, str]) -> list[MigrationRecord]:
    return [MigrationRecord(name=name, state=MigrationState(state)) for name, state in pairs]
