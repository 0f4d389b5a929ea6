"""
Dependency resolution — every descriptor name looked up in a catalog.

Resolution is all-or-nothing: if any name is missing for the platform,
``ResolutionError`` lists them all and no environment is produced.
"""

from __future__ import annotations

import logging

from devshell.adapters.catalog.base import PackageCatalog
from devshell.core.models.dependency import Artifact, ResolvedEnvironment
from devshell.core.models.descriptor import EnvironmentDescriptor

logger = logging.getLogger(__name__)


class ResolutionError(Exception):
    """One or more dependency names have no artifact for the platform."""

    def __init__(self, platform: str, missing: list[str], catalog: str = ""):
        self.platform = platform
        self.missing = missing
        self.catalog = catalog
        source = f" in the {catalog} catalog" if catalog else ""
        super().__init__(
            f"Cannot resolve {len(missing)} dependencies for platform "
            f"'{platform}'{source}: {', '.join(missing)}"
        )


def resolve_environment(
    descriptor: EnvironmentDescriptor,
    platform: str,
    catalog: PackageCatalog,
) -> ResolvedEnvironment:
    """Resolve the descriptor's libraries and tools for ``platform``.

    A name listed as both library and tool is looked up once.

    Raises:
        ResolutionError: If any name cannot be resolved.
    """
    resolved: dict[str, Artifact] = {}
    missing: list[str] = []

    for name in descriptor.dependency_names():
        artifact = catalog.lookup(name, platform)
        if artifact is None:
            missing.append(name)
        else:
            resolved[name] = artifact

    if missing:
        logger.error("Unresolved dependencies for %s: %s", platform, ", ".join(missing))
        raise ResolutionError(platform, missing, catalog=catalog.name)

    logger.info("Resolved %d dependencies for %s", len(resolved), platform)
    return ResolvedEnvironment(
        platform=platform,
        libraries=[resolved[name] for name in descriptor.libraries],
        tools=[resolved[name] for name in descriptor.tools],
    )
