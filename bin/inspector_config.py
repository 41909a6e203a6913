#!/usr/bin/env python3
"""Load APK inspector settings from a YAML file.

Settings are optional: a missing file or an empty document yields the
defaults, and command line flags override whatever the file provides.

Example inspector.yaml:

    log_level: DEBUG
    output_format: json
    csv_output: reports/summary.csv
    temp_prefix: apkm-
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from inspector_utils import InspectorError, setup_logging

_logger = setup_logging(__name__)

OUTPUT_FORMATS = ("text", "json")


class ConfigError(InspectorError):
    """The configuration file is unreadable or holds invalid values."""


@dataclass(frozen=True)
class InspectorConfig:
    """Runtime settings shared by the CLI and the orchestrator."""
    log_level: str | int = "INFO"
    output_format: str = "text"
    csv_output: str | None = None
    temp_prefix: str = "apkm-"

    def __post_init__(self) -> None:
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigError(
                f"output_format must be one of {', '.join(OUTPUT_FORMATS)}, "
                f"got {self.output_format!r}"
            )

    def with_overrides(self, **overrides: Any) -> InspectorConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def load_config(path: str | Path | None) -> InspectorConfig:
    """Read settings from a YAML file.

    Args:
        path: Path to the YAML file, or None for the defaults.

    Returns:
        InspectorConfig populated from the file.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values.
    """
    if path is None:
        return InspectorConfig()
    if not os.path.isfile(path):
        _logger.warning(f"Config file not found: {path}; using defaults")
        return InspectorConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(InspectorConfig)}
    for key in sorted(set(data) - known):
        _logger.warning(f"Ignoring unknown config key: {key}")

    values = {}
    for key, value in data.items():
        if key not in known or value is None:
            continue
        # numeric levels such as 10 pass through unchanged
        if key == "log_level" and isinstance(value, int) and not isinstance(value, bool):
            values[key] = value
        else:
            values[key] = str(value)
    return InspectorConfig(**values)
