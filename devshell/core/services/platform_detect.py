"""
Platform detection — the host's ``<os>-<arch>`` identifier.
"""

from __future__ import annotations

import logging
import platform

from devshell.core.models.platform import Platform

logger = logging.getLogger(__name__)

# uname spellings → the names catalogs use
_ARCH_MAP: dict[str, str] = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "armv8l": "aarch64",
    "i386": "i686",
}


def detect_platform() -> Platform:
    """Identify the platform of the running host."""
    os_name = platform.system().lower() or "unknown"
    machine = platform.machine().lower() or "unknown"
    identifier = f"{os_name}-{_ARCH_MAP.get(machine, machine)}"
    logger.debug("Detected platform: %s", identifier)
    return Platform(identifier=identifier)


def select_platform(explicit: str | None = None) -> Platform:
    """The session platform: explicit choice if given, else the host's."""
    if explicit:
        return Platform(identifier=explicit)
    return detect_platform()
