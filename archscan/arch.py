# archscan/arch.py

from __future__ import annotations
from typing import Dict, Optional

# --- canonical tokens -------------------------------------------------------------

INTEL32 = "intel32"
AMD64 = "amd64"
ARM64 = "arm64"
ARM = "arm"
IA64 = "ia64"
NEUTRAL = "neutral"
UNKNOWN = "unknown"

ARCHITECTURES = (INTEL32, AMD64, ARM64, ARM, IA64, NEUTRAL, UNKNOWN)

# Result labels that are not architectures.
ERROR = "error"
UNAVAILABLE = "unavailable-on-platform"

_ALIASES: Dict[str, str] = {
    "x86": INTEL32,
    "intel": INTEL32,
    "intel32": INTEL32,
    "32": INTEL32,
    "x64": AMD64,
    "amd64": AMD64,
    "64": AMD64,
    "arm64": ARM64,
    "arm": ARM,
    "ia64": IA64,
    "itanium": IA64,
    "neutral": NEUTRAL,
    "anycpu": NEUTRAL,
    "any": NEUTRAL,
}


def normalize(raw: Optional[str]) -> str:
    """Map a vendor architecture spelling to a canonical token.

    Matching ignores case and surrounding whitespace. Empty, missing and
    unrecognized values all map to ``unknown``.

    Args:
        raw (str | None): Raw architecture string from a manifest or property.

    Returns:
        str: One of ``ARCHITECTURES``.
    """
    if not raw:
        return UNKNOWN
    return _ALIASES.get(raw.strip().lower(), UNKNOWN)


def display_label(label: str) -> str:
    """Return the label shown to users (``unknown`` is capitalized)."""
    return "Unknown" if label == UNKNOWN else label
