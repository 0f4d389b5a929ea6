"""Package catalogs — a nixpkgs flake, or static data."""

from __future__ import annotations

from pathlib import Path

from devshell.adapters.catalog.base import PackageCatalog
from devshell.adapters.catalog.nix import NixCatalog
from devshell.adapters.catalog.static import StaticCatalog
from devshell.adapters.shell.runner import CommandRunner


def build_catalog(
    kind: str = "nix",
    catalog_file: Path | None = None,
    runner: CommandRunner | None = None,
    timeout: int = 120,
    build_timeout: int = 600,
    realise: bool = False,
) -> PackageCatalog:
    """Create the catalog selected by CLI option or environment.

    A catalog file always means a static catalog. ``realise`` asks the
    nix catalog to build what it resolves; ``timeout`` bounds each
    ``nix eval`` and ``build_timeout`` each ``nix build``.
    """
    if catalog_file is not None:
        return StaticCatalog.from_file(catalog_file)
    if kind == "nix":
        return NixCatalog(runner=runner, timeout=timeout, realise=realise, build_timeout=build_timeout)
    return StaticCatalog.builtin()


__all__ = ["NixCatalog", "PackageCatalog", "StaticCatalog", "build_catalog"]
