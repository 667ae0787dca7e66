# archscan/model.py

from __future__ import annotations
from dataclasses import dataclass

MIB = 1024 * 1024


@dataclass(frozen=True)
class DetectionResult:
    """Represents the architecture detected for one package file."""
    file_name: str     # base name, used for display and sorting
    size_bytes: int    # on-disk size, 0 if the file vanished
    architecture: str  # canonical token(s), "error" or "unavailable-on-platform"
    source_path: str   # full path as enumerated

    @property
    def size_mib(self) -> float:
        return round(self.size_bytes / MIB, 2)
