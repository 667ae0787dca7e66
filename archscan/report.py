# archscan/report.py

from __future__ import annotations
import csv
import os
from pathlib import Path
from typing import Iterable, List, Sequence, TextIO

from .arch import ARCHITECTURES, ERROR, UNAVAILABLE, UNKNOWN, display_label
from .model import DetectionResult

HEADERS = ("Name", "Size (MiB)", "Architecture")

_RESET = "\033[0m"
_RED = "\033[31m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_DIM = "\033[2m"


def supports_color(stream: TextIO, enabled: bool = True) -> bool:
    """Decide once whether ANSI colors should be written to ``stream``."""
    if not enabled or os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _color_for(label: str) -> str:
    if label == ERROR:
        return _RED
    if label == UNAVAILABLE:
        return _YELLOW
    if label == UNKNOWN:
        return _DIM
    if all(token in ARCHITECTURES for token in label.split(",")):
        return _GREEN
    return ""


def format_table(rows: Sequence[DetectionResult], color: bool = False) -> List[str]:
    """Render results as aligned text lines (header, rule, one line per row).

    Args:
        rows (Sequence[DetectionResult]): Results in display order.
        color (bool): Wrap the architecture column in ANSI colors.

    Returns:
        List[str]: Lines without trailing newlines.
    """
    cells = [(r.file_name, f"{r.size_mib:.2f}", r.architecture) for r in rows]
    name_w = max([len(HEADERS[0])] + [len(c[0]) for c in cells])
    size_w = max([len(HEADERS[1])] + [len(c[1]) for c in cells])

    lines = [
        f"{HEADERS[0]:<{name_w}}  {HEADERS[1]:>{size_w}}  {HEADERS[2]}",
        f"{'-' * name_w}  {'-' * size_w}  {'-' * len(HEADERS[2])}",
    ]
    for name, size, arch in cells:
        label = display_label(arch)
        code = _color_for(arch) if color else ""
        if code:
            label = f"{code}{label}{_RESET}"
        lines.append(f"{name:<{name_w}}  {size:>{size_w}}  {label}")
    return lines


def write_csv(out_path: Path, rows: Iterable[DetectionResult]) -> None:
    """Write scan results to a CSV file.

    Args:
        out_path (Path): Destination CSV file path.
        rows (Iterable[DetectionResult]): Scan results.

    Returns:
        None
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["name", "path", "size_bytes", "size_mib", "architecture"])
        for r in rows:
            writer.writerow([
                r.file_name,
                r.source_path,
                r.size_bytes,
                f"{r.size_mib:.2f}",
                r.architecture,
            ])
