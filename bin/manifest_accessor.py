#!/usr/bin/env python3
"""Decode AndroidManifest.xml from an APK with androguard.

Two views of the manifest are exposed:
    - ManifestSummary: package name, <uses-permission> names and
      <uses-feature> declarations
    - XmlNode: a read-only generic tree used for sub-elements the summary
      does not cover, such as <queries>

Both are required to inspect a package; a failure in either raises
ManifestDecodeError.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from loguru import logger as loguru_logger
from lxml import etree

try:
    from androguard.core.apk import APK  # androguard 4.x
except ImportError:
    from androguard.core.bytecodes.apk import APK  # androguard 3.x

from archive_reader import ArchiveReader
from inspector_utils import ManifestDecodeError, UsesFeature, setup_logging

# Suppress androguard's verbose debug logging (stdlib logging in 3.x, loguru in 4.x)
logging.getLogger("androguard").setLevel(logging.WARNING)
loguru_logger.disable("androguard")

_logger = setup_logging(__name__)

ANDROID_NS = "http://schemas.android.com/apk/res/android"


# =============================================================================
# Structured XML tree
# =============================================================================

@dataclass(frozen=True)
class XmlAttribute:
    """An attribute with its typed value (None when the decoder gave none)."""
    name: str
    value: Any = None

    def text(self) -> str | None:
        """Coerce the typed value to str; absent or empty values give None."""
        if self.value is None:
            return None
        text = str(self.value)
        return text or None


@dataclass(frozen=True)
class XmlNode:
    """A decoded XML element: tag, ordered attributes, ordered children."""
    tag: str
    attributes: tuple[XmlAttribute, ...] = ()
    children: tuple[XmlNode, ...] = ()

    def attribute(self, name: str) -> str | None:
        """Return the first attribute called name as text, or None."""
        for attr in self.attributes:
            if attr.name == name:
                return attr.text()
        return None

    def children_by_tag(self, tag: str) -> list[XmlNode]:
        return [child for child in self.children if child.tag == tag]

    @classmethod
    def from_element(cls, element: etree._Element) -> XmlNode:
        """
        Build a tree from an lxml element.

        Namespaces are dropped from tags and attribute names, so
        android:name becomes name. Comments and processing instructions
        are skipped.
        """
        attributes = tuple(
            XmlAttribute(etree.QName(key).localname, value)
            for key, value in element.attrib.items()
        )
        children = tuple(
            cls.from_element(child)
            for child in element
            if isinstance(child.tag, str)
        )
        return cls(etree.QName(element).localname, attributes, children)


# =============================================================================
# Manifest summary
# =============================================================================

@dataclass(frozen=True)
class ManifestSummary:
    """Typed manifest fields, in manifest order."""
    package: str | None = None
    permissions: tuple[str, ...] = ()
    features: tuple[UsesFeature, ...] = ()


def _android_attr(element: etree._Element, name: str) -> str | None:
    value = element.get(f"{{{ANDROID_NS}}}{name}")
    if value is None:
        value = element.get(name)
    return value


def summary_from_manifest(
    manifest: etree._Element,
    package: str | None = None
) -> ManifestSummary:
    """
    Collect permissions and features from a decoded manifest root.

    Args:
        manifest: lxml <manifest> element
        package: Package name when already known (e.g. from APK.get_package())

    Returns:
        ManifestSummary with entries kept in document order; unnamed
        permissions and features are skipped, duplicates are kept
    """
    if package is None:
        package = manifest.get("package")

    permissions = []
    for perm in manifest.findall("uses-permission"):
        name = _android_attr(perm, "name")
        if name:
            permissions.append(name)

    features = []
    for feature in manifest.findall("uses-feature"):
        name = _android_attr(feature, "name")
        if not name:
            continue
        required = (_android_attr(feature, "required") or "true").lower() != "false"
        features.append(UsesFeature(name=name, required=required))

    return ManifestSummary(
        package=package or None,
        permissions=tuple(permissions),
        features=tuple(features),
    )


# =============================================================================
# androguard access
# =============================================================================

def open_package(path: str | os.PathLike) -> APK:
    """
    Parse an APK and its binary manifest.

    Raises:
        ArchiveOpenError: If the file is not a readable ZIP container
        ManifestDecodeError: If the archive has no usable AndroidManifest.xml
    """
    ArchiveReader.open(path).close()

    try:
        apk = APK(os.fspath(path))
    except Exception as e:
        raise ManifestDecodeError(f"Failed to decode manifest of {path}: {e}") from e

    if not apk.is_valid_APK() or _manifest_root(apk) is None:
        raise ManifestDecodeError(f"No valid AndroidManifest.xml in {path}")
    _logger.debug(f"Decoded manifest of {path}")
    return apk


def _manifest_root(apk: APK) -> etree._Element | None:
    try:
        return apk.get_android_manifest_xml()
    except Exception as e:
        raise ManifestDecodeError(f"Failed to read manifest XML: {e}") from e


def read_manifest_summary(apk: APK) -> ManifestSummary:
    """Return the package name, permissions and features of an opened APK."""
    manifest = _manifest_root(apk)
    if manifest is None:
        raise ManifestDecodeError("Manifest XML is not available")
    try:
        package = apk.get_package()
    except Exception as e:
        raise ManifestDecodeError(f"Failed to read package name: {e}") from e
    return summary_from_manifest(manifest, package or None)


def read_raw_manifest_tree(apk: APK) -> XmlNode:
    """Return the whole decoded manifest as an XmlNode tree."""
    manifest = _manifest_root(apk)
    if manifest is None:
        raise ManifestDecodeError("Manifest XML is not available")
    return XmlNode.from_element(manifest)


def read_manifest(path: str | os.PathLike) -> tuple[ManifestSummary, XmlNode]:
    """Open a package and read both manifest views in one call."""
    apk = open_package(path)
    return read_manifest_summary(apk), read_raw_manifest_tree(apk)
