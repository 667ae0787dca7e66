"""Shared builders for synthetic package files."""
from __future__ import annotations

import struct
import zipfile
from pathlib import Path
from typing import Callable, Dict

import pytest

PE_OFFSET = 0x80


def pe_bytes(machine: int, pe_offset: int = PE_OFFSET) -> bytes:
    head = bytearray(pe_offset)
    head[0:2] = b"MZ"
    head[0x3C:0x40] = struct.pack("<I", pe_offset)
    return bytes(head) + b"PE\x00\x00" + struct.pack("<H", machine) + bytes(18)


@pytest.fixture
def make_pe(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str, machine: int = 0x8664) -> Path:
        path = tmp_path / name
        path.write_bytes(pe_bytes(machine))
        return path

    return _make


@pytest.fixture
def make_zip(tmp_path: Path) -> Callable[[str, Dict[str, str]], Path]:
    def _make(name: str, entries: Dict[str, str]) -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as z:
            for entry, text in entries.items():
                z.writestr(entry, text)
        return path

    return _make
