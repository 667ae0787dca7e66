# archscan/appx.py

from __future__ import annotations
from pathlib import Path
from typing import Iterable, Iterator, List, Optional
import xml.etree.ElementTree as ET
import zipfile

from .arch import ERROR, NEUTRAL, UNKNOWN, normalize

APPX_SUFFIXES = (".appx", ".msix", ".appxbundle", ".msixbundle")

BUNDLE_MANIFEST = "appxbundlemanifest.xml"
PACKAGE_MANIFEST = "appxmanifest.xml"

# Manifests are a few KiB; anything past this is not worth parsing.
MAX_MANIFEST_BYTES = 16 * 1024 * 1024

_ARCH_ATTRIBUTES = ("ProcessorArchitecture", "Architecture")


class ManifestTooLarge(ValueError):
    """Raised when a manifest entry exceeds MAX_MANIFEST_BYTES."""


# --- xml helpers ----------------------------------------------------------------


def local_name(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from an ElementTree tag."""
    return tag.rsplit("}", 1)[-1]


def children_named(parent: ET.Element, name: str) -> Iterator[ET.Element]:
    """Yield direct children whose local name is ``name``, any namespace."""
    for child in parent:
        if isinstance(child.tag, str) and local_name(child.tag) == name:
            yield child


def descendants_named(root: ET.Element, name: str) -> Iterator[ET.Element]:
    """Yield ``root`` and all descendants whose local name is ``name``."""
    for el in root.iter():
        if isinstance(el.tag, str) and local_name(el.tag) == name:
            yield el


# --- archive helpers ------------------------------------------------------------


def _find_entry(names: Iterable[str], suffix: str) -> Optional[str]:
    """Return the first archive entry whose normalized name ends with ``suffix``."""
    for name in names:
        if name.replace("\\", "/").lower().endswith(suffix):
            return name
    return None


def _read_manifest(z: zipfile.ZipFile, name: str) -> ET.Element:
    """Parse a manifest entry, refusing entries past the size limit."""
    info = z.getinfo(name)
    if info.file_size > MAX_MANIFEST_BYTES:
        raise ManifestTooLarge(f"{name}: {info.file_size} bytes")
    with z.open(info) as mf:
        data = mf.read(MAX_MANIFEST_BYTES + 1)
    if len(data) > MAX_MANIFEST_BYTES:
        raise ManifestTooLarge(name)
    return ET.fromstring(data)


def _join_unique(tokens: Iterable[str]) -> str:
    """Comma-join distinct non-unknown tokens in first-seen order."""
    seen: List[str] = []
    for token in tokens:
        if token != UNKNOWN and token not in seen:
            seen.append(token)
    return ",".join(seen) if seen else UNKNOWN


def bundle_architectures(root: ET.Element) -> str:
    """Collect the architectures declared by the packages of a bundle manifest.

    Packages that declare no architecture are left out rather than defaulted.
    """
    tokens: List[str] = []
    for packages in descendants_named(root, "Packages"):
        for package in children_named(packages, "Package"):
            raw = next(
                (package.get(attr) for attr in _ARCH_ATTRIBUTES if package.get(attr) is not None),
                None,
            )
            if raw is not None:
                tokens.append(normalize(raw))
    return _join_unique(tokens)


def package_architecture(root: ET.Element) -> str:
    """Read Identity/@ProcessorArchitecture of a package manifest.

    A missing or empty attribute means the package is architecture-neutral.
    """
    identity = None
    if local_name(root.tag) == "Package":
        identity = next(children_named(root, "Identity"), None)
    if identity is None:
        identity = next(descendants_named(root, "Identity"), None)
    if identity is None:
        return UNKNOWN
    return normalize(identity.get("ProcessorArchitecture") or NEUTRAL)


# --- public API -----------------------------------------------------------------


def detect_appx(path: Path) -> Optional[str]:
    """Detect the architecture(s) of an app package or bundle.

    A bundle manifest, when present, is used exclusively; otherwise the
    single-package manifest is read. Missing manifests give ``unknown``.

    Args:
        path (Path): ``.appx``/``.msix``/``.appxbundle``/``.msixbundle`` file.

    Returns:
        str | None: Token or comma-joined tokens, ``"error"``, or ``None`` if
        the extension is not an app-package one.
    """
    if path.suffix.lower() not in APPX_SUFFIXES:
        return None
    try:
        with zipfile.ZipFile(path, "r") as z:
            names = z.namelist()

            bundle = _find_entry(names, BUNDLE_MANIFEST)
            if bundle is not None:
                return bundle_architectures(_read_manifest(z, bundle))

            manifest = _find_entry(names, PACKAGE_MANIFEST)
            if manifest is None:
                return UNKNOWN
            return package_architecture(_read_manifest(z, manifest))
    except Exception:
        return ERROR
