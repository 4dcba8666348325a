"""Upgrade tooling for the Adapt authoring tool."""

from __future__ import annotations

__version__ = "0.4.0"

from .core.models import UpdateRequest, UpgradeMode, UpgradeResult, UpgradeStatus
from .orchestrator import UpgradeOrchestrator

__all__ = [
    "__version__",
    "UpdateRequest",
    "UpgradeMode",
    "UpgradeOrchestrator",
    "UpgradeResult",
    "UpgradeStatus",
]
