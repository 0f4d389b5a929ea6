"""
Config check use case — validate the descriptor and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from devshell.adapters.catalog.base import PackageCatalog
from devshell.core.config.loader import ConfigError, find_descriptor_file, load_descriptor
from devshell.core.models.descriptor import EnvironmentDescriptor
from devshell.core.use_cases.resolve import resolve_for

# Toolchain managers that have an adapter
KNOWN_MANAGERS = ("rustup",)


@dataclass
class ConfigCheckResult:
    """Result of descriptor validation."""

    valid: bool = False
    descriptor: EnvironmentDescriptor | None = None
    config_path: Path | None = None
    builtin: bool = False
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "builtin": self.builtin,
            "errors": self.errors,
            "warnings": self.warnings,
            "environment": self.descriptor.name if self.descriptor else None,
            "library_count": len(self.descriptor.libraries) if self.descriptor else 0,
            "tool_count": len(self.descriptor.tools) if self.descriptor else 0,
        }


def check_config(
    config_path: Path | None = None,
    catalog: PackageCatalog | None = None,
) -> ConfigCheckResult:
    """Validate the descriptor and, given a catalog, its supported platforms.

    Every platform the descriptor declares as supported must resolve
    completely; a miss there is an error, not a warning.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_descriptor_file()
    result.config_path = config_path
    result.builtin = config_path is None

    try:
        descriptor = load_descriptor(config_path, search=False)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.descriptor = descriptor

    if not descriptor.platforms:
        result.warnings.append("No supported platforms declared.")

    if not descriptor.libraries:
        result.warnings.append(
            f"No libraries declared; {descriptor.library_path_var} will not change."
        )

    if descriptor.toolchain.manager not in KNOWN_MANAGERS:
        result.errors.append(
            f"Unknown toolchain manager '{descriptor.toolchain.manager}' "
            f"(supported: {', '.join(KNOWN_MANAGERS)})"
        )

    ext_names = [e.name for e in descriptor.extensions]
    dupes = {n for n in ext_names if ext_names.count(n) > 1}
    if dupes:
        result.errors.append(f"Duplicate extensions: {', '.join(sorted(dupes))}")

    if catalog is not None:
        for platform in descriptor.platforms:
            outcome = resolve_for(descriptor, platform, catalog)
            if not outcome.ok:
                result.errors.append(outcome.error or f"Cannot resolve {platform}")

    result.valid = len(result.errors) == 0
    return result
