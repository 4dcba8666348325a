"""Detect newer releases of the authoring tool and the framework."""

from __future__ import annotations

import json
import logging
import os
import re
import ssl
from pathlib import Path
from typing import Any, Optional

import httpx
import truststore
from packaging.version import InvalidVersion, Version

from authoring_upgrade.core.config import (
    AUTHORING_TOOL_REPOSITORY,
    FRAMEWORK_REPOSITORY,
    GITHUB_TOKEN,
    Configuration,
)
from authoring_upgrade.core.constants import (
    DEFAULT_FRAMEWORK_REPO,
    DEFAULT_SERVER_REPO,
    FRAMEWORK_FOLDER,
)
from authoring_upgrade.core.errors import UpdateFetchError
from authoring_upgrade.core.models import UpdateRequest

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
_GITHUB_SLUG = re.compile(r"github\.com[/:]([^/]+)/([^/]+?)(?:\.git)?/?$")


def _github_token(configuration: Configuration) -> str | None:
    """Return sanitized GitHub token (config takes precedence) or None."""
    token = (
        configuration.get_str(GITHUB_TOKEN)
        or os.getenv("GH_TOKEN")
        or os.getenv("GITHUB_TOKEN")
        or ""
    ).strip()
    return token or None


def _github_auth_headers(token: str | None) -> dict:
    """Return Authorization header dict only when a non-empty token exists."""
    return {"Authorization": f"Bearer {token}"} if token else {}


def repository_slug(repository_url: str) -> str:
    """Turn a GitHub clone URL into ``owner/name``."""
    match = _GITHUB_SLUG.search(repository_url.strip())
    if not match:
        raise UpdateFetchError(f"Not a GitHub repository URL: {repository_url}")
    return f"{match.group(1)}/{match.group(2)}"


def parse_version(tag: str | None) -> Optional[Version]:
    if not tag:
        return None
    try:
        return Version(str(tag).strip().lstrip("vV"))
    except InvalidVersion:
        return None


def read_package_json(directory: Path) -> dict[str, Any]:
    package_file = directory / "package.json"
    if not package_file.exists():
        return {}
    try:
        data = json.loads(package_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not read %s: %s", package_file, exc)
        return {}
    return data if isinstance(data, dict) else {}


def declared_framework_major(package_data: dict[str, Any]) -> Optional[int]:
    """Major framework version the authoring tool declares, e.g. ``"^2.0.0"`` -> 2."""
    declared = package_data.get("framework")
    if declared is None:
        return None
    match = re.search(r"(\d+)", str(declared))
    return int(match.group(1)) if match else None


def select_release(
    releases: list[dict[str, Any]],
    *,
    newer_than: Optional[Version],
    major: Optional[int] = None,
) -> Optional[str]:
    """Pick the newest published release tag that is newer than ``newer_than``."""
    best_tag: Optional[str] = None
    best_version: Optional[Version] = None
    for release in releases:
        if release.get("draft") or release.get("prerelease"):
            continue
        tag = release.get("tag_name")
        version = parse_version(tag)
        if version is None:
            continue
        if major is not None and version.major != major:
            continue
        if newer_than is not None and version <= newer_than:
            continue
        if best_version is None or version > best_version:
            best_tag, best_version = tag, version
    return best_tag


class UpdateChecker:
    """Query GitHub for releases newer than the installed ones."""

    def __init__(
        self,
        configuration: Configuration,
        client: httpx.Client | None = None,
        *,
        api_url: str = GITHUB_API_URL,
        timeout: float = 30,
    ) -> None:
        self.configuration = configuration
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        if client is None:
            ssl_context = truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
            client = httpx.Client(verify=ssl_context)
        self.client = client

    def installed_versions(self) -> tuple[Optional[Version], Optional[Version]]:
        server_package = read_package_json(self.configuration.server_root)
        framework_package = read_package_json(
            self.configuration.framework_dir(FRAMEWORK_FOLDER)
        )
        return (
            parse_version(server_package.get("version")),
            parse_version(framework_package.get("version")),
        )

    def fetch_releases(self, repository_url: str) -> list[dict[str, Any]]:
        api_url = f"{self.api_url}/repos/{repository_slug(repository_url)}/releases"
        try:
            response = self.client.get(
                api_url,
                params={"per_page": 50},
                timeout=self.timeout,
                follow_redirects=True,
                headers=_github_auth_headers(_github_token(self.configuration)),
            )
        except httpx.HTTPError as exc:
            raise UpdateFetchError(f"Failed to query {api_url}: {exc}") from exc

        if response.status_code != 200:
            raise UpdateFetchError(
                f"GitHub API returned {response.status_code} for {api_url}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpdateFetchError(f"Failed to parse release JSON from {api_url}") from exc
        if not isinstance(payload, list):
            raise UpdateFetchError(f"Unexpected release payload from {api_url}")
        return payload

    def get_update_data(self) -> Optional[UpdateRequest]:
        """Return the revisions to upgrade to, or None when already current."""
        server_version, framework_version = self.installed_versions()
        logger.debug(
            "Installed versions: server=%s framework=%s", server_version, framework_version
        )

        server_repo = self.configuration.get_str(AUTHORING_TOOL_REPOSITORY, DEFAULT_SERVER_REPO)
        framework_repo = self.configuration.get_str(FRAMEWORK_REPOSITORY, DEFAULT_FRAMEWORK_REPO)

        authoring_tag = select_release(
            self.fetch_releases(server_repo), newer_than=server_version
        )
        framework_tag = select_release(
            self.fetch_releases(framework_repo),
            newer_than=framework_version,
            major=declared_framework_major(read_package_json(self.configuration.server_root)),
        )

        if not authoring_tag and not framework_tag:
            return None
        return UpdateRequest(
            authoring_tool_revision=authoring_tag,
            framework_revision=framework_tag,
        )


__all__ = [
    "GITHUB_API_URL",
    "UpdateChecker",
    "declared_framework_major",
    "parse_version",
    "read_package_json",
    "repository_slug",
    "select_release",
]
