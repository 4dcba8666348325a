"""Shared constants for the authoring tool upgrade."""

from __future__ import annotations

PRODUCT_NAME = "Adapt authoring tool"
FRAMEWORK_NAME = "Adapt framework"

DEFAULT_SERVER_REPO = "https://github.com/adaptlearning/adapt_authoring.git"
DEFAULT_FRAMEWORK_REPO = "https://github.com/adaptlearning/adapt_framework.git"

# Folder holding the framework checkout below <temp>/<tenant>/
FRAMEWORK_FOLDER = "adapt_framework"

CONFIG_DIR = "conf"
CONFIG_FILENAME = "config.yaml"
TEMP_DIR = "temp"

__all__ = [
    "PRODUCT_NAME",
    "FRAMEWORK_NAME",
    "DEFAULT_SERVER_REPO",
    "DEFAULT_FRAMEWORK_REPO",
    "FRAMEWORK_FOLDER",
    "CONFIG_DIR",
    "CONFIG_FILENAME",
    "TEMP_DIR",
]
