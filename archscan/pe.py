# archscan/pe.py

from __future__ import annotations
from pathlib import Path
from typing import BinaryIO, Dict, Optional
import struct

from .arch import AMD64, ARM, ARM64, ERROR, IA64, INTEL32, UNKNOWN

EXE_SUFFIX = ".exe"

DOS_MAGIC = 0x5A4D          # "MZ"
PE_MAGIC = 0x00004550       # "PE\0\0"
PE_POINTER_OFFSET = 0x3C

# IMAGE_FILE_MACHINE_* values; kept apart from the string alias table.
_MACHINE_TYPES: Dict[int, str] = {
    0x014C: INTEL32,
    0x8664: AMD64,
    0xAA64: ARM64,
    0x01C4: ARM,
    0x0200: IA64,
}


class TruncatedHeader(OSError):
    """Raised when a header field ends before its declared width."""


def _read_exact(f: BinaryIO, size: int) -> bytes:
    data = f.read(size)
    if len(data) != size:
        raise TruncatedHeader(f"expected {size} bytes, got {len(data)}")
    return data


def machine_architecture(machine: int) -> str:
    """Map a COFF machine-type code to a canonical token."""
    return _MACHINE_TYPES.get(machine, UNKNOWN)


def _read_machine(f: BinaryIO) -> str:
    """Walk MZ -> e_lfanew -> PE signature -> machine field."""
    head = f.read(2)
    if len(head) < 2 or struct.unpack("<H", head)[0] != DOS_MAGIC:
        return UNKNOWN

    f.seek(PE_POINTER_OFFSET)
    (pe_offset,) = struct.unpack("<I", _read_exact(f, 4))
    f.seek(pe_offset)

    sig = f.read(4)
    if len(sig) < 4 or struct.unpack("<I", sig)[0] != PE_MAGIC:
        return UNKNOWN

    (machine,) = struct.unpack("<H", _read_exact(f, 2))
    return machine_architecture(machine)


# --- public API -----------------------------------------------------------------


def detect_pe(path: Path) -> Optional[str]:
    """Detect the target architecture of a PE executable.

    Returns ``None`` when the path is not an ``.exe``. Files that are readable
    but carry no MZ/PE signature are ``unknown``; I/O failures, including a
    header cut short after the MZ signature, are ``error``.

    Args:
        path (Path): File to inspect.

    Returns:
        str | None: Canonical token, ``"error"``, or ``None`` if not applicable.
    """
    if path.suffix.lower() != EXE_SUFFIX:
        return None
    try:
        with path.open("rb") as f:
            return _read_machine(f)
    except (OSError, struct.error):
        return ERROR
