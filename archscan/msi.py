# archscan/msi.py

"""
Windows Installer (.msi) architecture detection.

The template summary property (PID 7) of an installer database has the form
``"<platform>;<language ids>"``, e.g. ``"x64;1033"``. Reading it relies on the
native Windows Installer API, so detection is modelled as a capability: a
working reader on hosts that have msi.dll, and a stand-in that reports
``unavailable-on-platform`` everywhere else. Callers pick one via
``select_msi_reader()`` and pass it down.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional
import ctypes
import sys

from .arch import ERROR, UNAVAILABLE, normalize

MSI_SUFFIX = ".msi"

PID_TEMPLATE = 7

ERROR_SUCCESS = 0
ERROR_MORE_DATA = 234
VT_LPSTR = 30

_INITIAL_BUFFER = 64


class MsiError(OSError):
    """Raised when the installer database or its summary stream cannot be read."""


class MsiReader(ABC):
    """Base installer reader: template lookup is left to subclasses."""

    available = True

    def detect(self, path: Path) -> Optional[str]:
        """Detect the platform declared by an installer package.

        Args:
            path (Path): File to inspect.

        Returns:
            str | None: Canonical token, ``"error"``, or ``None`` if the file
            is not an ``.msi``.
        """
        if path.suffix.lower() != MSI_SUFFIX:
            return None
        try:
            template = self.read_template(path)
        except (OSError, ValueError):
            return ERROR
        return architecture_from_template(template)

    @abstractmethod
    def read_template(self, path: Path) -> str:
        """Return the raw template summary property of ``path``."""


class UnavailableMsiReader(MsiReader):
    """Stand-in for hosts without the Windows Installer API."""

    available = False

    def detect(self, path: Path) -> Optional[str]:
        if path.suffix.lower() != MSI_SUFFIX:
            return None
        return UNAVAILABLE

    def read_template(self, path: Path) -> str:
        raise MsiError(0, "Windows Installer API is not available on this host")


def architecture_from_template(template: str) -> str:
    """Normalize the platform part of a ``"<platform>;<lcid>"`` template."""
    return normalize(template.split(";", 1)[0])


# --- native reader --------------------------------------------------------------


class _FileTime(ctypes.Structure):
    _fields_ = [("dwLowDateTime", ctypes.c_uint32), ("dwHighDateTime", ctypes.c_uint32)]


def _bind(dll: Any) -> Any:
    """Declare argument/return types for the msi.dll entry points we call."""
    handle_p = ctypes.POINTER(ctypes.c_ulong)

    dll.MsiOpenDatabaseW.argtypes = [ctypes.c_wchar_p, ctypes.c_void_p, handle_p]
    dll.MsiOpenDatabaseW.restype = ctypes.c_uint

    dll.MsiGetSummaryInformationW.argtypes = [ctypes.c_ulong, ctypes.c_wchar_p, ctypes.c_uint, handle_p]
    dll.MsiGetSummaryInformationW.restype = ctypes.c_uint

    dll.MsiSummaryInfoGetPropertyW.argtypes = [
        ctypes.c_ulong,
        ctypes.c_uint,
        ctypes.POINTER(ctypes.c_uint),
        ctypes.POINTER(ctypes.c_int),
        ctypes.POINTER(_FileTime),
        ctypes.c_wchar_p,
        ctypes.POINTER(ctypes.c_uint32),
    ]
    dll.MsiSummaryInfoGetPropertyW.restype = ctypes.c_uint

    dll.MsiCloseHandle.argtypes = [ctypes.c_ulong]
    dll.MsiCloseHandle.restype = ctypes.c_uint
    return dll


class WindowsMsiReader(MsiReader):
    """Reads the template property through msi.dll."""

    def __init__(self, dll: Any) -> None:
        self._msi = _bind(dll)

    def read_template(self, path: Path) -> str:
        db = ctypes.c_ulong(0)
        # szPersist NULL == MSIDBOPEN_READONLY
        rc = self._msi.MsiOpenDatabaseW(str(path), None, ctypes.byref(db))
        if rc != ERROR_SUCCESS:
            raise MsiError(rc, f"MsiOpenDatabase failed for {path}")
        try:
            summary = ctypes.c_ulong(0)
            rc = self._msi.MsiGetSummaryInformationW(db, None, 0, ctypes.byref(summary))
            if rc != ERROR_SUCCESS:
                raise MsiError(rc, f"MsiGetSummaryInformation failed for {path}")
            try:
                return self._template_property(summary)
            finally:
                self._msi.MsiCloseHandle(summary)
        finally:
            self._msi.MsiCloseHandle(db)

    def _template_property(self, summary: ctypes.c_ulong) -> str:
        data_type = ctypes.c_uint(0)
        int_value = ctypes.c_int(0)
        file_time = _FileTime()
        size = _INITIAL_BUFFER

        while True:
            buf = ctypes.create_unicode_buffer(size)
            cch = ctypes.c_uint32(size)
            rc = self._msi.MsiSummaryInfoGetPropertyW(
                summary,
                PID_TEMPLATE,
                ctypes.byref(data_type),
                ctypes.byref(int_value),
                ctypes.byref(file_time),
                buf,
                ctypes.byref(cch),
            )
            if rc == ERROR_MORE_DATA:
                size = cch.value + 1
                continue
            if rc != ERROR_SUCCESS:
                raise MsiError(rc, "MsiSummaryInfoGetProperty failed")
            if data_type.value != VT_LPSTR:
                raise MsiError(0, "template property is missing or not a string")
            return buf.value


def select_msi_reader() -> MsiReader:
    """Return the installer reader supported by this host."""
    if sys.platform != "win32":
        return UnavailableMsiReader()
    try:
        dll = ctypes.WinDLL("msi")
    except OSError:
        return UnavailableMsiReader()
    return WindowsMsiReader(dll)
