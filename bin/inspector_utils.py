#!/usr/bin/env python3
"""
Shared utilities for the APK inspector modules.

This module provides common functionality used across the inspection pipeline:
- Logging configuration
- Error taxonomy
- Inspection result data structures
- Supported input extensions
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Any


# =============================================================================
# File Extensions
# =============================================================================

APK_EXTENSION = ".apk"
APKM_EXTENSION = ".apkm"

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset({APK_EXTENSION, APKM_EXTENSION})


def file_extension(path: str | os.PathLike) -> str:
    """Return the lower-cased extension of a path (including the dot)."""
    return os.path.splitext(os.fspath(path))[1].lower()


def is_bundle(path: str | os.PathLike) -> bool:
    """Check whether a path names an APKM bundle rather than a plain APK."""
    return file_extension(path) == APKM_EXTENSION


# =============================================================================
# Logging Configuration
# =============================================================================

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

# Loggers created through setup_logging, so the CLI can retune them together
_configured_loggers: dict[str, logging.Logger] = {}


def setup_logging(
    name: str,
    level: int = logging.INFO,
    format_string: str | None = None
) -> logging.Logger:
    """
    Configure logging for an inspector module.

    Args:
        name: Logger name (typically __name__)
        level: Logging level (default INFO)
        format_string: Custom format string (optional)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.NOTSET)

        if format_string is None:
            format_string = LOG_FORMAT

        formatter = logging.Formatter(format_string)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    _configured_loggers[name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """
    Change the level of every logger created through setup_logging.

    Args:
        level: Logging level as an int or a name such as "DEBUG"
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")
    for logger in _configured_loggers.values():
        logger.setLevel(level)


# =============================================================================
# Errors
# =============================================================================

class InspectorError(Exception):
    """Base class for every failure raised by the inspection pipeline."""


class ArchiveOpenError(InspectorError):
    """The container is missing, unreadable or not a ZIP archive."""


class BaseApkNotFoundError(InspectorError):
    """An APKM bundle holds no base.apk entry."""


class ManifestDecodeError(InspectorError):
    """The binary manifest is missing or could not be decoded."""


class StreamError(InspectorError):
    """An archive entry could not be read or decompressed."""


# =============================================================================
# Inspection Result Data Structures
# =============================================================================

@dataclass(frozen=True)
class UsesFeature:
    """A <uses-feature> declaration."""
    name: str
    required: bool = True

    def describe(self) -> str:
        return f"{self.name} ({'required' if self.required else 'optional'})"


@dataclass(frozen=True)
class InspectionResult:
    """Everything reported for one input file."""
    file_path: str
    package_name: str | None = None
    permissions: tuple[str, ...] = ()
    uses_features: tuple[UsesFeature, ...] = ()
    hardware_apis: tuple[str, ...] = ()
    queried_packages: tuple[str, ...] = ()
    queried_intents: tuple[str, ...] = ()
    queried_providers: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serialisable dictionary."""
        return {
            "filePath": self.file_path,
            "packageName": self.package_name,
            "permissions": list(self.permissions),
            "usesFeatures": [
                {"name": f.name, "required": f.required} for f in self.uses_features
            ],
            "hardwareApis": list(self.hardware_apis),
            "queriedPackages": list(self.queried_packages),
            "queriedIntents": list(self.queried_intents),
            "queriedProviders": list(self.queried_providers),
        }
