"""
Device integrity probes used when a client opts into enforcement.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Protocol, Sequence

__all__ = [
    "DEFAULT_TAMPER_MARKERS",
    "FilesystemIntegrityChecker",
    "IntegrityChecker",
]

DEFAULT_TAMPER_MARKERS: Sequence[str] = (
    "/private/var/lib/apt/",
    "/Applications/Cydia.app",
    "/system/xbin/su",
    "/system/app/Superuser.apk",
)


class IntegrityChecker(Protocol):
    def is_compromised(self) -> bool:
        ...


class FilesystemIntegrityChecker:
    """Reports a compromised device when any of the marker paths exists."""

    def __init__(self, markers: Iterable[str] = DEFAULT_TAMPER_MARKERS) -> None:
        self.markers = tuple(markers)

    def is_compromised(self) -> bool:
        return any(Path(marker).exists() for marker in self.markers)
