"""Command-line entry point for the authoring tool upgrade.

Usage:
    authoring-upgrade                       # interactive
    authoring-upgrade --auto                # check GitHub and upgrade
    authoring-upgrade --manual --authoring-tool-revision v0.11.0
    authoring-upgrade migrations            # show migration state
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .commands import register_commands, run_upgrade

app = typer.Typer(
    name="authoring-upgrade",
    help="Upgrade the authoring tool, its framework and the database",
    add_completion=False,
    invoke_without_command=True,
)
register_commands(app)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.callback()
def callback(
    ctx: typer.Context,
    proceed: Optional[bool] = typer.Option(
        None, "--yes/--no", help="Continue without asking for confirmation"
    ),
    automatic: Optional[bool] = typer.Option(
        None,
        "--auto/--manual",
        help="Upgrade to the latest releases, or to the revisions given",
    ),
    authoring_tool_revision: Optional[str] = typer.Option(
        None,
        "--authoring-tool-revision",
        help="Git revision (branch/tag/commit) for the authoring tool",
    ),
    framework_revision: Optional[str] = typer.Option(
        None,
        "--framework-revision",
        help="Git revision (branch/tag/commit) for the framework",
    ),
    server_root: Optional[Path] = typer.Option(
        None,
        "--server-root",
        help="Authoring tool installation directory (defaults to the current directory)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Run the upgrade when no subcommand is given.

    Without any option the upgrade asks its questions interactively; any
    option switches to non-interactive mode where unanswered questions take
    their defaults.
    """
    configure_logging(verbose)
    ctx.obj = {"server_root": server_root}
    if ctx.invoked_subcommand is not None:
        return

    interactive = (
        proceed is None
        and automatic is None
        and authoring_tool_revision is None
        and framework_revision is None
        and server_root is None
        and not verbose
    )
    run_upgrade(
        server_root=server_root or Path.cwd(),
        interactive=interactive,
        proceed=proceed,
        automatic=automatic,
        authoring_tool_revision=authoring_tool_revision,
        framework_revision=framework_revision,
    )


def main():
    app()


__all__ = ["app", "main"]
