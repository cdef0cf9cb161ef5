"""
Host capabilities — platform facts captured once at startup.

Steps never call ``platform`` or read ``/etc/os-release`` themselves.
They read these flags from the execution context, so every code path
can be exercised in tests by constructing a Host by hand.
"""

from __future__ import annotations

import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_ARCH_ALIASES = {
    "amd64": "x86_64",
    "x86_64": "x86_64",
    "aarch64": "arm64",
    "arm64": "arm64",
}


@dataclass(frozen=True)
class Host:
    """Operating system, CPU architecture and distribution."""

    system: str = "Linux"
    machine: str = "x86_64"
    distribution: str | None = None
    is_root: bool = False

    @property
    def arch(self) -> str:
        """Normalized architecture: ``x86_64`` or ``arm64`` (or raw value)."""
        return _ARCH_ALIASES.get(self.machine.lower(), self.machine.lower())

    @property
    def is_macos(self) -> bool:
        return self.system == "Darwin"

    @property
    def is_linux(self) -> bool:
        return self.system == "Linux"

    @property
    def is_unix(self) -> bool:
        return self.system != "Windows"

    @classmethod
    def detect(cls, os_release: Path = Path("/etc/os-release")) -> Host:
        system = platform.system()
        host = cls(
            system=system,
            machine=platform.machine(),
            distribution=_read_distribution(os_release) if system == "Linux" else None,
            is_root=hasattr(os, "geteuid") and os.geteuid() == 0,
        )
        logger.debug("Detected host: %s", host)
        return host


def _read_distribution(os_release: Path) -> str | None:
    """Return the ``ID=`` value of os-release, lowercased, if readable."""
    try:
        content = os_release.read_text(encoding="utf-8")
    except OSError:
        return None
    for line in content.splitlines():
        key, sep, value = line.partition("=")
        if sep and key.strip() == "ID":
            return value.strip().strip("\"'").lower() or None
    return None
