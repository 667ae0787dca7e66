# archscan/scan.py

"""
Dispatcher: route each package file to its reader and collect results.
"""
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from .appx import APPX_SUFFIXES, detect_appx
from .model import DetectionResult
from .msi import MSI_SUFFIX, MsiReader, select_msi_reader
from .pe import EXE_SUFFIX, detect_pe
from .walk import iter_files

KIND_EXE = "exe"
KIND_MSI = "msi"
KIND_APPX = "appx"

PACKAGE_SUFFIXES = (EXE_SUFFIX, MSI_SUFFIX) + APPX_SUFFIXES


def package_kind(path: Path) -> Optional[str]:
    """Infer the package kind from the file extension alone."""
    suffix = path.suffix.lower()
    if suffix == EXE_SUFFIX:
        return KIND_EXE
    if suffix == MSI_SUFFIX:
        return KIND_MSI
    if suffix in APPX_SUFFIXES:
        return KIND_APPX
    return None


def detect_architecture(path: Path, msi_reader: MsiReader) -> Optional[str]:
    """Run the reader matching ``path``; ``None`` if no reader applies."""
    kind = package_kind(path)
    if kind == KIND_EXE:
        return detect_pe(path)
    if kind == KIND_MSI:
        return msi_reader.detect(path)
    if kind == KIND_APPX:
        return detect_appx(path)
    return None


def _size_of(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return 0


def scan_file(path: Path, msi_reader: MsiReader) -> Optional[DetectionResult]:
    """Build the DetectionResult for one file, or ``None`` if it is not a package."""
    architecture = detect_architecture(path, msi_reader)
    if architecture is None:
        return None
    return DetectionResult(
        file_name=path.name,
        size_bytes=_size_of(path),
        architecture=architecture,
        source_path=str(path),
    )


def _sort_key(result: DetectionResult):
    return result.file_name.casefold(), result.source_path


def scan(
    root: Path,
    recursive: bool = False,
    msi_reader: Optional[MsiReader] = None,
    workers: int = 1,
) -> List[DetectionResult]:
    """Scan a file or directory for Windows packages.

    Per-file failures never abort the scan; they show up as ``error``
    results. Output is sorted by file name regardless of ``workers``.

    Args:
        root (Path): File or directory to scan.
        recursive (bool): Descend into subdirectories.
        msi_reader (MsiReader | None): Installer reader; defaults to the one
            supported by this host.
        workers (int): Number of files processed concurrently.

    Returns:
        List[DetectionResult]: One record per package file, sorted by name.

    Raises:
        FileNotFoundError: If ``root`` does not exist.
    """
    if not root.exists():
        raise FileNotFoundError(f"Input not found: {root}")
    reader = msi_reader if msi_reader is not None else select_msi_reader()
    files = list(iter_files(root, recursive=recursive, suffixes=PACKAGE_SUFFIXES))

    if workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            found = list(pool.map(lambda fp: scan_file(fp, reader), files))
    else:
        found = [scan_file(fp, reader) for fp in files]

    return sorted((r for r in found if r is not None), key=_sort_key)
