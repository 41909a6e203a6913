#!/usr/bin/env python3
"""Inspect one APK or APKM file and assemble an InspectionResult.

Pipeline:
    1. .apkm bundles: extract base.apk into a fresh temp directory
    2. Decode the manifest summary and raw tree (androguard)
    3. Sort permissions and features
    4. Extract <queries> declarations
    5. Scan DEX entries for hardware API descriptors
    6. Assemble the result under the caller's original path

The temp directory is removed on every exit path. No partial result is
returned: the first error from any stage propagates.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import shutil
import tempfile
from pathlib import Path
from typing import AsyncIterator

from bundle_resolver import extract_base_package
from inspector_config import InspectorConfig
from inspector_utils import InspectionResult, is_bundle, setup_logging
from manifest_accessor import read_manifest
from query_extractor import extract_queries
from scan_hardware_apis import scan_hardware_apis_async

_logger = setup_logging(__name__)


def remove_temp_dir(temp_dir: str | os.PathLike) -> None:
    """Best-effort recursive removal; failures are logged, never raised."""
    try:
        shutil.rmtree(temp_dir)
    except FileNotFoundError:
        pass
    except OSError as e:
        _logger.warning(f"Failed to remove temp directory {temp_dir}: {e}")


@contextlib.asynccontextmanager
async def working_package(
    file_path: str | os.PathLike,
    config: InspectorConfig | None = None
) -> AsyncIterator[Path]:
    """
    Yield the path of the APK to inspect.

    A plain APK is yielded as is. For an APKM bundle, base.apk is extracted
    into a new temp directory, which is removed when the block exits,
    whether extraction or the block itself raised or not.
    """
    if not is_bundle(file_path):
        yield Path(file_path)
        return

    config = config or InspectorConfig()
    temp_dir = tempfile.mkdtemp(prefix=config.temp_prefix)
    _logger.debug(f"Created temp directory {temp_dir}")
    try:
        _logger.info("Extracting base.apk from APKM bundle...")
        yield await asyncio.to_thread(extract_base_package, file_path, temp_dir)
    finally:
        remove_temp_dir(temp_dir)


async def inspect_package_async(package_path: str | os.PathLike, file_path: str) -> InspectionResult:
    """
    Run the manifest, query and bytecode stages against an APK on disk.

    Args:
        package_path: APK to read (may be a temp copy)
        file_path: Path reported in the result

    Returns:
        InspectionResult with every sequence sorted
    """
    summary, tree = await asyncio.to_thread(read_manifest, package_path)
    queries = extract_queries(tree)
    hardware_apis = await scan_hardware_apis_async(package_path)

    return InspectionResult(
        file_path=file_path,
        package_name=summary.package,
        permissions=tuple(sorted(summary.permissions)),
        uses_features=tuple(sorted(summary.features, key=lambda f: f.name)),
        hardware_apis=tuple(hardware_apis),
        queried_packages=tuple(sorted(queries.packages)),
        queried_intents=tuple(sorted(queries.intents)),
        queried_providers=tuple(sorted(queries.providers)),
    )


async def inspect_file_async(
    file_path: str | os.PathLike,
    config: InspectorConfig | None = None
) -> InspectionResult:
    """
    Inspect an .apk or .apkm file.

    Raises:
        ArchiveOpenError: If the file (or the extracted base.apk) is not a ZIP
        BaseApkNotFoundError: If a bundle holds no base.apk
        ManifestDecodeError: If the manifest is missing or malformed
        StreamError: If base.apk cannot be extracted
    """
    file_path = os.fspath(file_path)
    async with working_package(file_path, config) as package_path:
        _logger.debug(f"Inspecting {package_path}")
        return await inspect_package_async(package_path, file_path)


def inspect_file(
    file_path: str | os.PathLike,
    config: InspectorConfig | None = None
) -> InspectionResult:
    """Synchronous wrapper around inspect_file_async."""
    return asyncio.run(inspect_file_async(file_path, config))
