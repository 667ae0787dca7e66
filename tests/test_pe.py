"""Tests for the PE header parser."""
from __future__ import annotations

import struct
from pathlib import Path

import pytest

from archscan.pe import detect_pe


@pytest.mark.parametrize(
    "machine,expected",
    [
        (0x014C, "intel32"),
        (0x8664, "amd64"),
        (0xAA64, "arm64"),
        (0x01C4, "arm"),
        (0x0200, "ia64"),
        (0x5032, "unknown"),
    ],
)
def test_machine_types(make_pe, machine: int, expected: str) -> None:
    assert detect_pe(make_pe("app.exe", machine)) == expected


def test_extension_match_is_case_insensitive(make_pe) -> None:
    assert detect_pe(make_pe("SETUP.EXE")) == "amd64"


def test_other_extensions_are_not_applicable(make_pe) -> None:
    assert detect_pe(make_pe("library.dll")) is None


def test_empty_file_is_unknown(tmp_path: Path) -> None:
    empty = tmp_path / "empty.exe"
    empty.write_bytes(b"")
    assert detect_pe(empty) == "unknown"


def test_missing_mz_is_unknown(tmp_path: Path) -> None:
    bogus = tmp_path / "bogus.exe"
    bogus.write_bytes(b"#!/bin/sh\necho hi\n" + bytes(100))
    assert detect_pe(bogus) == "unknown"


def test_mz_without_pe_signature_is_unknown(tmp_path: Path) -> None:
    dos_only = bytearray(0x100)
    dos_only[0:2] = b"MZ"
    dos_only[0x3C:0x40] = struct.pack("<I", 0x80)
    path = tmp_path / "dos.exe"
    path.write_bytes(bytes(dos_only))
    assert detect_pe(path) == "unknown"


def test_pe_pointer_past_end_of_file_is_unknown(tmp_path: Path) -> None:
    head = bytearray(0x40)
    head[0:2] = b"MZ"
    head[0x3C:0x40] = struct.pack("<I", 0xFFFF)
    path = tmp_path / "short.exe"
    path.write_bytes(bytes(head))
    assert detect_pe(path) == "unknown"


def test_truncated_header_is_error(tmp_path: Path) -> None:
    path = tmp_path / "cut.exe"
    path.write_bytes(b"MZ" + bytes(10))
    assert detect_pe(path) == "error"


def test_truncated_machine_field_is_error(tmp_path: Path) -> None:
    head = bytearray(0x80)
    head[0:2] = b"MZ"
    head[0x3C:0x40] = struct.pack("<I", 0x80)
    path = tmp_path / "nomachine.exe"
    path.write_bytes(bytes(head) + b"PE\x00\x00\x64")
    assert detect_pe(path) == "error"


def test_unreadable_file_is_error(make_pe, monkeypatch: pytest.MonkeyPatch) -> None:
    path = make_pe("locked.exe")

    def deny(self, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "open", deny)
    assert detect_pe(path) == "error"


def test_vanished_file_is_error(tmp_path: Path) -> None:
    assert detect_pe(tmp_path / "gone.exe") == "error"


def test_detection_is_idempotent(make_pe) -> None:
    path = make_pe("twice.exe", 0xAA64)
    assert detect_pe(path) == detect_pe(path) == "arm64"
