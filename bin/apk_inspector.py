#!/usr/bin/env python3
"""Report permissions, features, hardware APIs and queries of Android apps.

Inspects each .apk or .apkm file given on the command line. Files are
processed one after another; a file that is missing, has an unsupported
extension or fails to inspect is reported on stderr and the remaining
files are still processed.

Usage:
    apk-inspector [--json] [--csv OUT.csv] [--config inspector.yaml] [-v]
                  <file.apk|file.apkm> [...]
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from typing import Sequence

from generate_report import format_text_report, write_json_report, write_summary_csv
from inspect_apk import inspect_file_async
from inspector_config import ConfigError, InspectorConfig, load_config
from inspector_utils import (
    SUPPORTED_EXTENSIONS,
    InspectionResult,
    file_extension,
    set_log_level,
    setup_logging,
)

_logger = setup_logging(__name__)

USAGE = "Usage: apk-inspector <file.apk|file.apkm> [...]"
DESCRIPTION = "Inspects APK and APKM files for permissions and package queries."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apk-inspector",
        usage="%(prog)s [options] <file.apk|file.apkm> [...]",
        description=DESCRIPTION,
    )
    parser.add_argument("files", nargs="*", help="APK or APKM files to inspect")
    parser.add_argument(
        "--json",
        action="store_const",
        const="json",
        dest="output_format",
        help="Print results as JSON instead of the text report"
    )
    parser.add_argument("--csv", dest="csv_output", help="Also write a summary CSV to this path")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument(
        "-v", "--verbose",
        action="store_const",
        const="DEBUG",
        dest="log_level",
        help="Enable debug logging"
    )
    return parser


async def run(files: Sequence[str], config: InspectorConfig) -> list[InspectionResult]:
    """
    Inspect files sequentially, reporting per-file errors without stopping.

    Text reports are printed as each file completes; the collected results
    are returned for JSON and CSV output.
    """
    results = []
    for file_path in files:
        resolved_path = os.path.abspath(file_path)

        if not os.path.exists(resolved_path):
            print(f"Error: File not found: {resolved_path}", file=sys.stderr)
            continue

        ext = file_extension(resolved_path)
        if ext not in SUPPORTED_EXTENSIONS:
            print(f"Error: Unsupported file type: {ext}", file=sys.stderr)
            continue

        try:
            result = await inspect_file_async(resolved_path, config)
        except Exception as e:
            print(f"Error inspecting {file_path}: {e}", file=sys.stderr)
            _logger.debug(f"Inspection of {resolved_path} failed", exc_info=True)
            continue

        results.append(result)
        if config.output_format == "text":
            print(format_text_report(result))

    return results


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, inspect every file and emit the requested reports.

    Returns:
        Exit code: 1 when no files were given or the config is invalid, 0 otherwise
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.files:
        print(USAGE)
        print(f"\n{DESCRIPTION}")
        return 1

    try:
        config = load_config(args.config).with_overrides(
            output_format=args.output_format,
            csv_output=args.csv_output,
            log_level=args.log_level,
        )
        set_log_level(config.log_level)
    except (ConfigError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    results = asyncio.run(run(args.files, config))

    if config.output_format == "json":
        write_json_report(results, sys.stdout)

    if config.csv_output:
        count = write_summary_csv(results, config.csv_output)
        _logger.info(f"Wrote {config.csv_output} ({count} rows)")

    return 0


if __name__ == "__main__":
    sys.exit(main())
