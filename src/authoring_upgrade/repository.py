"""Move a git checkout to a requested revision."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import subprocess
from typing import Sequence

from authoring_upgrade.core.errors import RepositoryUpdateError
from authoring_upgrade.core.models import UpdateTarget

logger = logging.getLogger(__name__)

__all__ = ["CommandResult", "RepositoryUpdater", "run_command"]


@dataclass
class CommandResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _first_line(text: str) -> str:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return ""


def run_command(args: Sequence[str], cwd: Path | None = None, timeout: int = 600) -> CommandResult:
    """Run a command and normalize failure shape for deterministic handling."""
    try:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout,
        )
        return CommandResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
    except FileNotFoundError:
        return CommandResult(
            returncode=127,
            stdout="",
            stderr=f"{args[0]} executable not found on PATH",
        )
    except subprocess.TimeoutExpired:
        return CommandResult(
            returncode=124,
            stdout="",
            stderr=f"command timed out: {' '.join(args)}",
        )


class RepositoryUpdater:
    """Check out ``target.revision`` of ``target.repository_url`` into ``target.directory``.

    Clones when the directory is not a checkout yet, otherwise fetches from
    the configured URL. A revision naming a remote branch is reset to the
    remote tip so that re-running the upgrade picks up new commits.
    """

    def __init__(
        self,
        install_command: Sequence[str] | None = None,
        *,
        timeout: int = 600,
    ) -> None:
        self.install_command = list(install_command) if install_command else None
        self.timeout = timeout

    def _git(self, target: UpdateTarget, *args: str, cwd: Path | None = None) -> CommandResult:
        result = run_command(["git", *args], cwd=cwd or target.directory, timeout=self.timeout)
        if not result.ok:
            reason = _first_line(result.stderr) or f"git {args[0]} exited with {result.returncode}"
            raise RepositoryUpdateError(target, reason)
        return result

    def _is_checkout(self, directory: Path) -> bool:
        return (directory / ".git").exists()

    def _prepare_checkout(self, target: UpdateTarget) -> None:
        directory = target.directory
        if self._is_checkout(directory):
            remote = run_command(["git", "remote", "get-url", "origin"], cwd=directory)
            if remote.ok:
                if remote.stdout.strip() != target.repository_url:
                    self._git(target, "remote", "set-url", "origin", target.repository_url)
            else:
                self._git(target, "remote", "add", "origin", target.repository_url)
            return

        if directory.exists() and any(directory.iterdir()):
            # Existing files without git metadata, e.g. an unpacked release.
            logger.info("Initialising git metadata in %s", directory)
            self._git(target, "init")
            self._git(target, "remote", "add", "origin", target.repository_url)
            return

        directory.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Cloning %s into %s", target.repository_url, directory)
        self._git(
            target,
            "clone",
            "--no-checkout",
            target.repository_url,
            str(directory),
            cwd=directory.parent,
        )

    def _is_remote_branch(self, target: UpdateTarget) -> bool:
        result = run_command(
            ["git", "rev-parse", "--verify", "--quiet", f"refs/remotes/origin/{target.revision}"],
            cwd=target.directory,
        )
        return result.ok

    def update(self, target: UpdateTarget) -> None:
        """Raise :class:`RepositoryUpdateError` when any step fails."""
        logger.debug("Updating %s to %s", target.directory, target.revision)
        self._prepare_checkout(target)
        self._git(target, "fetch", "origin", "--tags", "--force", "--prune")

        if self._is_remote_branch(target):
            self._git(target, "checkout", "--force", "-B", target.revision, f"origin/{target.revision}")
        else:
            self._git(target, "checkout", "--force", target.revision)

        if self.install_command:
            result = run_command(self.install_command, cwd=target.directory, timeout=self.timeout)
            if not result.ok:
                reason = _first_line(result.stderr) or (
                    f"{' '.join(self.install_command)} exited with {result.returncode}"
                )
                raise RepositoryUpdateError(target, reason)
        logger.info("%s is now at %s", target.directory, target.revision)
