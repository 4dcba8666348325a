"""CLI command modules for the upgrade tool."""

import typer

from .migrations import migrations
from .upgrade import run_upgrade


def register_commands(app: typer.Typer) -> None:
    app.command("migrations")(migrations)


__all__ = ["migrations", "register_commands", "run_upgrade"]
