"""Top-level ``migrations`` command: show migration state without applying."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from authoring_upgrade.core.errors import MigrationError
from authoring_upgrade.core.models import MigrationState
from authoring_upgrade.migrations.service import MigrationService

from .upgrade import console, err_console, load_configuration


def migrations(ctx: typer.Context) -> None:
    """List every known migration and whether it has been applied."""
    server_root: Path = (ctx.obj or {}).get("server_root") or Path.cwd()
    configuration = load_configuration(server_root)
    service = MigrationService(configuration)

    try:
        service.sync()
        config = service.get_config()
        records = service.create_runner(config).list()
    except MigrationError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    if not records:
        console.print("[dim]No migrations found.[/dim]")
        return

    table = Table(title="Migrations", header_style="bold cyan")
    table.add_column("Migration", style="bright_white")
    table.add_column("State")
    table.add_column("Created", style="dim")
    for record in records:
        state = (
            "[green]up[/green]" if record.state == MigrationState.UP else "[yellow]down[/yellow]"
        )
        created = record.created_at.strftime("%Y-%m-%d %H:%M") if record.created_at else ""
        table.add_row(record.name, state, created)
    console.print(table)

    pending = sum(1 for record in records if not record.is_up)
    console.print(f"[cyan]{pending} pending[/cyan] of {len(records)} migration(s)")


__all__ = ["migrations"]
