#!/usr/bin/env python3
"""Read entries out of ZIP-format containers (APK and APKM files).

Wraps zipfile so the rest of the pipeline sees one error taxonomy:
ArchiveOpenError when the container itself is unusable and StreamError
when a single entry cannot be read.
"""

from __future__ import annotations

import asyncio
import os
import zipfile
import zlib
from pathlib import Path
from typing import IO, Iterator

from inspector_utils import ArchiveOpenError, StreamError, setup_logging

_logger = setup_logging(__name__)

# Errors zipfile raises while opening, decompressing or verifying a single member;
# RuntimeError covers encrypted members, ValueError a closed or busy archive
ENTRY_READ_ERRORS = (
    zipfile.BadZipFile, zlib.error, OSError, EOFError, NotImplementedError,
    RuntimeError, ValueError,
)


class ArchiveReader:
    """
    An open ZIP container.

    Use as a context manager:

        >>> with ArchiveReader.open("app.apk") as archive:
        ...     for entry in archive.iter_entries():
        ...         print(entry.filename)
    """

    def __init__(self, path: str | Path, zf: zipfile.ZipFile):
        self.path = Path(path)
        self._zip = zf

    @classmethod
    def open(cls, path: str | os.PathLike) -> ArchiveReader:
        """
        Open a ZIP container for reading.

        Args:
            path: Path to the archive

        Returns:
            ArchiveReader for the container

        Raises:
            ArchiveOpenError: If the file is missing, unreadable or not a ZIP
        """
        try:
            zf = zipfile.ZipFile(path, "r")
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveOpenError(f"Cannot open archive {path}: {e}") from e
        _logger.debug(f"Opened {path} ({len(zf.infolist())} entries)")
        return cls(path, zf)

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> ArchiveReader:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def iter_entries(self) -> Iterator[zipfile.ZipInfo]:
        """
        Yield file entries lazily in archive order.

        The order is whatever the central directory holds; it is not sorted.
        Directory entries are skipped.
        """
        for info in self._zip.infolist():
            if info.is_dir():
                continue
            yield info

    def open_entry_stream(self, entry: zipfile.ZipInfo) -> IO[bytes]:
        """
        Open a binary stream over an entry's decompressed content.

        Raises:
            StreamError: If the entry cannot be opened
        """
        try:
            return self._zip.open(entry, "r")
        except ENTRY_READ_ERRORS as e:
            raise StreamError(f"Cannot open {entry.filename} in {self.path}: {e}") from e

    def read_entry(self, entry: zipfile.ZipInfo) -> bytes:
        """
        Read an entry's full decompressed content.

        Raises:
            StreamError: On CRC, decompression or I/O failure
        """
        try:
            with self.open_entry_stream(entry) as stream:
                return stream.read()
        except ENTRY_READ_ERRORS as e:
            raise StreamError(f"Failed to read {entry.filename} in {self.path}: {e}") from e

    async def read_entry_async(self, entry: zipfile.ZipInfo) -> bytes:
        """Read an entry without blocking the event loop."""
        return await asyncio.to_thread(self.read_entry, entry)
