"""
Resolve use case — resolution and search path, without side effects.

Backs ``devshell resolve``, ``devshell library-path``,
``devshell shell-hook`` and ``devshell platforms``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from devshell.adapters.catalog.base import PackageCatalog
from devshell.core.models.dependency import ResolvedEnvironment
from devshell.core.models.descriptor import EnvironmentDescriptor
from devshell.core.services.library_path import make_library_path
from devshell.core.services.resolver import ResolutionError, resolve_environment


@dataclass
class ResolveResult:
    """Outcome of resolving a descriptor for one platform."""

    platform: str = ""
    supported: bool = False
    resolved: ResolvedEnvironment | None = None
    library_path: str = ""
    missing: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict = {
            "platform": self.platform,
            "supported": self.supported,
            "ok": self.ok,
        }
        if self.error:
            result["error"] = self.error
            result["missing"] = self.missing
            return result
        assert self.resolved is not None
        result.update(self.resolved.to_dict())
        result["library_path"] = self.library_path
        return result


def resolve_for(
    descriptor: EnvironmentDescriptor,
    platform: str,
    catalog: PackageCatalog,
) -> ResolveResult:
    """Resolve ``descriptor`` for ``platform``; failures land in the result."""
    result = ResolveResult(platform=platform, supported=descriptor.supports(platform))
    try:
        resolved = resolve_environment(descriptor, platform, catalog)
    except ResolutionError as e:
        result.error = str(e)
        result.missing = e.missing
        return result

    result.resolved = resolved
    result.library_path = make_library_path(resolved.libraries)
    return result


def check_platforms(
    descriptor: EnvironmentDescriptor,
    catalog: PackageCatalog,
) -> list[ResolveResult]:
    """Resolve for every platform the descriptor or the catalog names.

    Supported platforms come first, in descriptor order.
    """
    platforms = list(descriptor.platforms)
    platforms += [p for p in catalog.platforms() if p not in platforms]
    return [resolve_for(descriptor, p, catalog) for p in platforms]
