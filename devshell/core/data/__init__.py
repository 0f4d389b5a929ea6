"""
Central data registry for the built-in catalogs.

Loads JSON from ``devshell/core/data/catalogs/`` once at first access
and caches it for the process lifetime.

Usage::

    from devshell.core.data import get_registry

    registry = get_registry()
    packages = registry.package_catalog       # platform -> name -> entry
    defaults = registry.default_environment   # descriptor mapping
"""

from __future__ import annotations

import copy
import json
import logging
from functools import cached_property
from pathlib import Path

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent


def _load_json(relative_path: str) -> dict:
    """Load a JSON file relative to the data directory."""
    path = _DATA_DIR / relative_path
    if not path.exists():
        logger.warning("Data file not found: %s", path)
        return {}
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class DataRegistry:
    """Registry for the static data shipped with the package.

    Each property lazily loads its JSON file on first access and caches
    the result for the lifetime of the instance.
    """

    @cached_property
    def package_catalog(self) -> dict[str, dict[str, dict]]:
        """Platform → package name → ``{version, path, lib}``."""
        data = _load_json("catalogs/packages.json")
        logger.debug("Loaded package catalog for %d platforms", len(data))
        return data

    @cached_property
    def default_environment(self) -> dict:
        """The built-in environment descriptor, as a raw mapping."""
        return _load_json("catalogs/default_environment.json")

    def default_environment_copy(self) -> dict:
        """A deep copy callers may mutate before validation."""
        return copy.deepcopy(self.default_environment)


# ── Module-level singleton ───────────────────────────────────────

_registry: DataRegistry | None = None


def get_registry() -> DataRegistry:
    """Return the process-level DataRegistry singleton."""
    global _registry  # noqa: PLW0603
    if _registry is None:
        _registry = DataRegistry()
    return _registry
