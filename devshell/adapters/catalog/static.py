"""
Static catalog — resolves names from pinned data.

The built-in data lives in ``devshell/core/data/catalogs/packages.json``;
a YAML file with the same shape can replace it. Nothing here fetches
the paths it names, so they exist only if something else put them in
the store. The built-in data is for inspection and tests; entering a
shell wants the nix catalog.
"""

from __future__ import annotations

import logging
from pathlib import Path

from devshell.adapters.catalog.base import PackageCatalog
from devshell.core.models.dependency import Artifact

logger = logging.getLogger(__name__)


class StaticCatalog(PackageCatalog):
    """Catalog over a ``platform -> name -> {version, path, lib}`` mapping."""

    def __init__(self, entries: dict[str, dict[str, dict]]):
        self._entries = entries

    @classmethod
    def builtin(cls) -> StaticCatalog:
        from devshell.core.data import get_registry

        return cls(get_registry().package_catalog)

    @classmethod
    def from_file(cls, path: Path) -> StaticCatalog:
        from devshell.core.config.loader import load_catalog_file

        return cls(load_catalog_file(path))

    @property
    def name(self) -> str:
        return "static"

    def platforms(self) -> list[str]:
        return sorted(self._entries)

    def lookup(self, name: str, platform: str) -> Artifact | None:
        entry = self._entries.get(platform, {}).get(name)
        if entry is None:
            logger.debug("static: %s not available for %s", name, platform)
            return None
        return Artifact(
            name=name,
            platform=platform,
            version=str(entry.get("version", "")),
            path=entry["path"],
            lib=entry.get("lib"),
        )
