"""Tests for architecture normalization."""
from __future__ import annotations

import pytest

from archscan.arch import ARCHITECTURES, display_label, normalize

ALIASES = {
    "intel32": ["x86", "intel", "intel32", "32"],
    "amd64": ["x64", "amd64", "64"],
    "arm64": ["arm64"],
    "arm": ["arm"],
    "ia64": ["ia64", "itanium"],
    "neutral": ["neutral", "anycpu", "any"],
}


@pytest.mark.parametrize("canonical,aliases", sorted(ALIASES.items()))
def test_aliases_map_regardless_of_case(canonical: str, aliases: list) -> None:
    for alias in aliases:
        assert normalize(alias) == canonical
        assert normalize(alias.upper()) == canonical
        assert normalize(alias.title()) == canonical


@pytest.mark.parametrize("raw", ["", None, "mips", "x86_64", "ARM64EC", "x64;1033"])
def test_unrecognized_or_missing_is_unknown(raw) -> None:
    assert normalize(raw) == "unknown"


def test_normalize_always_returns_a_canonical_token() -> None:
    for raw in ["Intel", " AMD64 ", "anyCPU", "garbage", ""]:
        assert normalize(raw) in ARCHITECTURES


def test_display_label_capitalizes_unknown_only() -> None:
    assert display_label("unknown") == "Unknown"
    assert display_label("amd64") == "amd64"
    assert display_label("error") == "error"
