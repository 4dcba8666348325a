"""Checks for external tools the upgrade shells out to."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import shutil
import subprocess

from .errors import MissingDependencyError

logger = logging.getLogger(__name__)

__all__ = [
    "DependencyIssue",
    "DependencyReport",
    "PRIMARY_DEPENDENCIES",
    "SECONDARY_DEPENDENCIES",
    "check_dependencies",
    "check_primary_dependencies",
    "check_secondary_dependencies",
]

# tool -> install hint
PRIMARY_DEPENDENCIES: dict[str, str] = {
    "git": "Install git from https://git-scm.com/downloads",
}
SECONDARY_DEPENDENCIES: dict[str, str] = {
    "npm": "Install Node.js and npm from https://nodejs.org/",
}


@dataclass
class DependencyIssue:
    tool: str
    message: str
    remediation: str


@dataclass
class DependencyReport:
    """Result envelope for a dependency check."""

    checked: list[str] = field(default_factory=list)
    versions: dict[str, str] = field(default_factory=dict)
    errors: list[DependencyIssue] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors

    @property
    def first_error(self) -> DependencyIssue | None:
        return self.errors[0] if self.errors else None

    def raise_for_errors(self) -> None:
        primary = self.first_error
        if primary is not None:
            raise MissingDependencyError(
                primary.tool, f"{primary.message} {primary.remediation}"
            )


def _tool_version(executable: str, timeout: int = 15) -> str | None:
    try:
        completed = subprocess.run(
            [executable, "--version"],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired):
        return None
    if completed.returncode != 0:
        return None
    for line in (completed.stdout or "").splitlines():
        if line.strip():
            return line.strip()
    return ""


def check_dependencies(tools: dict[str, str]) -> DependencyReport:
    report = DependencyReport()
    for tool, hint in tools.items():
        report.checked.append(tool)
        executable = shutil.which(tool)
        if executable is None:
            report.errors.append(
                DependencyIssue(
                    tool=tool,
                    message=f"Required dependency '{tool}' was not found on PATH.",
                    remediation=hint,
                )
            )
            continue
        version = _tool_version(executable)
        if version is None:
            report.errors.append(
                DependencyIssue(
                    tool=tool,
                    message=f"'{tool} --version' failed; the installation looks broken.",
                    remediation=hint,
                )
            )
            continue
        report.versions[tool] = version
        logger.debug("Found %s: %s", tool, version)
    return report


def check_primary_dependencies() -> DependencyReport:
    """Tools the upgrade cannot run without."""
    return check_dependencies(PRIMARY_DEPENDENCIES)


def check_secondary_dependencies() -> DependencyReport:
    """Tools used after checkout; missing ones only produce warnings."""
    return check_dependencies(SECONDARY_DEPENDENCIES)
