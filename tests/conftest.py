"""Shared pytest fixtures for the APK inspector tests."""

import struct
import sys
import tempfile
import zipfile
from pathlib import Path

import pytest

# Add bin directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "bin"))


@pytest.fixture
def make_zip(tmp_path):
    """Return a factory writing {entry_name: bytes} to a ZIP under tmp_path.

    Entries are written in the order given, so tests control enumeration order.
    """
    def _make_zip(name, entries, compression=zipfile.ZIP_DEFLATED):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w", compression=compression) as z:
            for entry_name, data in entries.items():
                z.writestr(entry_name, data)
        return path

    return _make_zip


@pytest.fixture
def isolated_tempdir(tmp_path, monkeypatch):
    """Point tempfile at an empty directory so leftover temp dirs are visible."""
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(temp_root))
    return temp_root


@pytest.fixture
def mark_encrypted():
    """Return a function setting the encrypted flag bit on one ZIP entry.

    The bit is set in both the local header and the central directory, so
    zipfile refuses to open the entry without a password.
    """
    def _mark_encrypted(path, entry_name):
        data = bytearray(path.read_bytes())
        with zipfile.ZipFile(path) as z:
            header_offset = z.getinfo(entry_name).header_offset
        data[header_offset + 6] |= 0x01

        name = entry_name.encode("utf-8")
        start = 0
        while True:
            record = data.find(b"PK\x01\x02", start)
            if record == -1:
                break
            name_len = struct.unpack_from("<H", data, record + 28)[0]
            if data[record + 46:record + 46 + name_len] == name:
                data[record + 8] |= 0x01
            start = record + 4
        path.write_bytes(bytes(data))

    return _mark_encrypted
