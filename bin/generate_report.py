#!/usr/bin/env python3
"""
Report rendering for APK Inspector results.

Output formats:
    - Text: one human-readable block per inspected file
    - JSON: a list of result dictionaries
    - CSV: one summary row per inspected file (pandas)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any, Iterable, Sequence

import pandas as pd

from inspector_utils import InspectionResult

RULE = "=" * 60

# Separator for list fields flattened into a single CSV cell
CSV_LIST_SEPARATOR = "; "

CSV_COLUMNS: list[str] = [
    "FilePath", "PackageName", "Permissions", "UsesFeatures", "HardwareApis",
    "QueriedPackages", "QueriedIntents", "QueriedProviders",
]


def _section(title: str, items: Iterable[str]) -> list[str]:
    lines = ["", title]
    items = list(items)
    if not items:
        lines.append("  (none)")
    else:
        lines.extend(f"  • {item}" for item in items)
    return lines


def format_text_report(result: InspectionResult) -> str:
    """Render one result as the multi-section text report."""
    lines = ["", RULE, f"File: {result.file_path}"]
    if result.package_name:
        lines.append(f"Package: {result.package_name}")
    lines.append(RULE)

    lines += _section("📋 PERMISSIONS:", result.permissions)
    lines += _section("🔧 USES FEATURES:", (f.describe() for f in result.uses_features))
    lines += _section("📡 HARDWARE APIS (detected in code):", result.hardware_apis)
    lines += _section("📦 QUERIED PACKAGES:", result.queried_packages)
    lines += _section("🎯 QUERIED INTENTS:", result.queried_intents)
    lines += _section("🔌 QUERIED PROVIDERS:", result.queried_providers)
    lines.append("")

    return "\n".join(lines)


def result_to_dict(result: InspectionResult) -> dict[str, Any]:
    return result.to_dict()


def write_json_report(results: Sequence[InspectionResult], stream: IO[str]) -> None:
    """Write results as an indented JSON list."""
    json.dump([result_to_dict(r) for r in results], stream, indent=2, ensure_ascii=False)
    stream.write("\n")


def results_to_dataframe(results: Sequence[InspectionResult]) -> pd.DataFrame:
    """Flatten results into one row per file."""
    rows = []
    for r in results:
        rows.append({
            "FilePath": r.file_path,
            "PackageName": r.package_name or "",
            "Permissions": CSV_LIST_SEPARATOR.join(r.permissions),
            "UsesFeatures": CSV_LIST_SEPARATOR.join(f.describe() for f in r.uses_features),
            "HardwareApis": CSV_LIST_SEPARATOR.join(r.hardware_apis),
            "QueriedPackages": CSV_LIST_SEPARATOR.join(r.queried_packages),
            "QueriedIntents": CSV_LIST_SEPARATOR.join(r.queried_intents),
            "QueriedProviders": CSV_LIST_SEPARATOR.join(r.queried_providers),
        })
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def write_summary_csv(results: Sequence[InspectionResult], output_path: str | Path) -> int:
    """
    Write a one-row-per-file summary CSV.

    Args:
        results: Inspection results to summarise
        output_path: Path to output CSV file

    Returns:
        Number of rows written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df = results_to_dataframe(results)
    df.to_csv(output_path, index=False, encoding="utf-8")
    return len(df)
