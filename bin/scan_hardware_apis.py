#!/usr/bin/env python3
"""Detect hardware API usage from type descriptors in DEX bytecode.

Every classesN.dex entry in the package is read in full and searched for
the type descriptors of sensitive device APIs (sensors, camera, location,
microphone, Bluetooth, NFC, biometrics). This is a string heuristic over
the raw bytes: a hit means the descriptor is referenced somewhere in the
bytecode, not that the API is reachable.
"""

from __future__ import annotations

import asyncio
import os
import re

from archive_reader import ArchiveReader
from inspector_utils import StreamError, setup_logging

_logger = setup_logging(__name__)

# classes.dex, classes2.dex, ... (multidex packages split bytecode)
DEX_ENTRY_PATTERN = re.compile(r"^classes\d*\.dex$")

# (descriptor substring, reported label)
HARDWARE_API_CATALOG: tuple[tuple[str, str], ...] = (
    ("Landroid/hardware/Sensor;", "android.hardware.Sensor"),
    ("Landroid/hardware/SensorManager;", "android.hardware.SensorManager"),
    ("Landroid/hardware/SensorEvent;", "android.hardware.SensorEvent"),
    ("Landroid/hardware/SensorEventListener;", "android.hardware.SensorEventListener"),
    ("Landroid/hardware/camera2/", "android.hardware.camera2"),
    ("Landroid/hardware/Camera;", "android.hardware.Camera"),
    ("Landroid/location/LocationManager;", "android.location.LocationManager"),
    ("Landroid/media/AudioRecord;", "android.media.AudioRecord"),
    ("Landroid/bluetooth/", "android.bluetooth"),
    ("Landroid/nfc/", "android.nfc"),
    ("Landroid/hardware/fingerprint/", "android.hardware.fingerprint"),
    ("Landroid/hardware/biometrics/", "android.hardware.biometrics"),
)


def is_dex_entry(name: str) -> bool:
    return DEX_ENTRY_PATTERN.match(name) is not None


def match_hardware_apis(text: str) -> set[str]:
    """Return the labels of every catalog pattern contained in text."""
    return {label for pattern, label in HARDWARE_API_CATALOG if pattern in text}


async def scan_hardware_apis_async(package_path: str | os.PathLike) -> list[str]:
    """
    Scan all DEX entries of a package for hardware API descriptors.

    Reads are issued together and joined before any result is produced.
    An entry that fails to read is logged and skipped.

    Args:
        package_path: Path to the APK

    Returns:
        Sorted, deduplicated list of matched labels

    Raises:
        ArchiveOpenError: If the package is not a readable ZIP
    """
    found: set[str] = set()

    with ArchiveReader.open(package_path) as archive:
        dex_entries = [e for e in archive.iter_entries() if is_dex_entry(e.filename)]
        payloads = await asyncio.gather(
            *(archive.read_entry_async(entry) for entry in dex_entries),
            return_exceptions=True,
        )

    for entry, payload in zip(dex_entries, payloads):
        if isinstance(payload, StreamError):
            _logger.warning(f"Skipping unreadable {entry.filename}: {payload}")
            continue
        if isinstance(payload, BaseException):
            raise payload
        # latin-1 maps each byte to one char, so ASCII descriptors survive binary noise
        found |= match_hardware_apis(payload.decode("latin-1"))

    _logger.debug(f"Scanned {len(dex_entries)} dex entries in {package_path}: {len(found)} APIs")
    return sorted(found)


def scan_hardware_apis(package_path: str | os.PathLike) -> list[str]:
    """Synchronous wrapper around scan_hardware_apis_async."""
    return asyncio.run(scan_hardware_apis_async(package_path))
