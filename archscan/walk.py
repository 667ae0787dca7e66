# archscan/walk.py

from __future__ import annotations
from pathlib import Path
from typing import Collection, Iterator


def iter_files(root: Path, recursive: bool = False, suffixes: Collection[str] = ()) -> Iterator[Path]:
    """Iterate over files under a path, optionally filtered by extension.

    Args:
        root (Path): File or directory to scan.
        recursive (bool): Descend into subdirectories.
        suffixes (Collection[str]): Lower-case suffixes (with dot) to keep;
            empty keeps every file.

    Yields:
        Path: Paths to each matching file.
    """
    if root.is_file():
        if not suffixes or root.suffix.lower() in suffixes:
            yield root
        return

    entries = root.rglob("*") if recursive else root.iterdir()
    for p in entries:
        if p.is_file() and (not suffixes or p.suffix.lower() in suffixes):
            yield p
