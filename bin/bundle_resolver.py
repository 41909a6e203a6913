#!/usr/bin/env python3
"""Pull the base package out of an APKM bundle.

An APKM bundle is a ZIP holding base.apk plus optional split APKs. Only
base.apk is needed to inspect the app; splits are not resolved.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from archive_reader import ENTRY_READ_ERRORS, ArchiveReader
from inspector_utils import BaseApkNotFoundError, StreamError, setup_logging

_logger = setup_logging(__name__)

BASE_APK_NAME = "base.apk"


def is_base_apk_entry(name: str) -> bool:
    """Check if a bundle entry name is base.apk, at the root or in a folder."""
    name = name.replace("\\", "/").lower()
    return name == BASE_APK_NAME or name.endswith("/" + BASE_APK_NAME)


def extract_base_package(bundle_path: str | os.PathLike, temp_dir: str | os.PathLike) -> Path:
    """
    Copy the bundle's base.apk into a directory owned by the caller.

    The first matching entry wins and scanning stops there. The caller
    creates temp_dir and is responsible for removing it, including when
    this function raises half-way through.

    Args:
        bundle_path: Path to the .apkm bundle
        temp_dir: Existing directory to write base.apk into

    Returns:
        Path to the extracted base.apk

    Raises:
        ArchiveOpenError: If the bundle is not a readable ZIP
        BaseApkNotFoundError: If no entry is named base.apk
        StreamError: If the entry cannot be read or written
    """
    output_path = Path(temp_dir) / BASE_APK_NAME

    with ArchiveReader.open(bundle_path) as archive:
        for entry in archive.iter_entries():
            if not is_base_apk_entry(entry.filename):
                continue

            _logger.debug(f"Extracting {entry.filename} from {bundle_path}")
            with archive.open_entry_stream(entry) as src:
                try:
                    with open(output_path, "wb") as dst:
                        shutil.copyfileobj(src, dst)
                except ENTRY_READ_ERRORS as e:
                    raise StreamError(
                        f"Failed to extract {entry.filename} from {bundle_path}: {e}"
                    ) from e
            return output_path

    raise BaseApkNotFoundError(f"No base.apk found in APKM file {bundle_path}")
