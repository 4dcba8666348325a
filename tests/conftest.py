from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from rich.console import Console

from authoring_upgrade.core.config import Configuration
from authoring_upgrade.core.constants import DEFAULT_FRAMEWORK_REPO, DEFAULT_SERVER_REPO


@pytest.fixture()
def server_root(tmp_path: Path) -> Iterator[Path]:
    root = tmp_path / "server"
    root.mkdir()
    yield root


@pytest.fixture()
def configuration(server_root: Path) -> Configuration:
    return Configuration(
        server_root,
        {
            "authoringToolRepository": DEFAULT_SERVER_REPO,
            "frameworkRepository": DEFAULT_FRAMEWORK_REPO,
            "masterTenantID": "master",
        },
    )


@pytest.fixture()
def console() -> Console:
    return Console(record=True, width=200, force_terminal=False, color_system=None)
