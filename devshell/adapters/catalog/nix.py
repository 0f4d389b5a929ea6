"""
Nix catalog — resolves names against a nixpkgs flake.

Each name is the attribute ``legacyPackages.<system>.<name>`` of the
flake. ``nix eval`` computes the store paths; with ``realise`` on,
``nix build --no-link`` then fetches or builds those outputs so the
directories put on the search path exist. A name that fails either
step is unresolved. The library output is the derivation's ``lib``
output when it has one, otherwise the default one (what ``lib.getLib``
picks).
"""

from __future__ import annotations

import json
import logging

from devshell.adapters.catalog.base import PackageCatalog
from devshell.adapters.shell.runner import CommandRunner, run_command
from devshell.core.models.dependency import Artifact
from devshell.core.models.platform import Platform

logger = logging.getLogger(__name__)

DEFAULT_FLAKE = "nixpkgs"

# flake-utils' default systems
DEFAULT_PLATFORMS = ["darwin-aarch64", "darwin-x86_64", "linux-aarch64", "linux-x86_64"]

_NIX = ["nix", "--extra-experimental-features", "nix-command flakes"]

_APPLY = (
    "p: { path = p.outPath; output = p.outputName or \"out\"; "
    "lib = (p.lib or p).outPath; version = p.version or \"\"; }"
)


class NixCatalog(PackageCatalog):
    """Catalog backed by ``nix eval`` (and ``nix build``) against a flake."""

    def __init__(
        self,
        flake: str = DEFAULT_FLAKE,
        runner: CommandRunner | None = None,
        timeout: int = 120,
        realise: bool = False,
        build_timeout: int = 600,
    ):
        self._flake = flake
        self._runner = runner or run_command
        self._timeout = timeout
        self._realise = realise
        self._build_timeout = build_timeout
        self._cache: dict[tuple[str, str], Artifact | None] = {}

    @property
    def name(self) -> str:
        return "nix"

    @property
    def realises(self) -> bool:
        return self._realise

    def platforms(self) -> list[str]:
        return list(DEFAULT_PLATFORMS)

    def _installable(self, name: str, platform: str) -> str:
        system = Platform(identifier=platform).nix_system
        return f"{self._flake}#legacyPackages.{system}.{name}"

    def eval_command(self, name: str, platform: str) -> list[str]:
        return [*_NIX, "eval", "--json", self._installable(name, platform), "--apply", _APPLY]

    def build_command(self, name: str, platform: str, outputs: list[str]) -> list[str]:
        installable = f"{self._installable(name, platform)}^{','.join(outputs)}"
        return [*_NIX, "build", "--no-link", "--print-out-paths", installable]

    def lookup(self, name: str, platform: str) -> Artifact | None:
        key = (name, platform)
        if key not in self._cache:
            artifact = self._evaluate(name, platform)
            if artifact is not None and self._realise and not self._build(artifact):
                artifact = None
            self._cache[key] = artifact
        return self._cache[key]

    def _evaluate(self, name: str, platform: str) -> Artifact | None:
        result = self._runner(self.eval_command(name, platform), timeout=self._timeout)
        if not result.ok:
            logger.debug("nix: cannot evaluate %s for %s: %s", name, platform, result.describe_failure())
            return None

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError:
            logger.warning("nix: unexpected output for %s: %r", name, result.stdout[:200])
            return None

        path = data.get("path")
        if not path:
            return None
        lib = data.get("lib")
        return Artifact(
            name=name,
            platform=platform,
            version=data.get("version") or "",
            path=path,
            lib=lib if lib and lib != path else None,
            output=data.get("output") or "out",
        )

    def _build(self, artifact: Artifact) -> bool:
        """Realise the artifact's outputs; False if nix could not."""
        outputs = [artifact.output] + (["lib"] if artifact.lib else [])
        cmd = self.build_command(artifact.name, artifact.platform, outputs)
        logger.info("nix: realising %s (%s)", artifact.name, artifact.platform)
        result = self._runner(cmd, timeout=self._build_timeout)
        if not result.ok:
            logger.warning(
                "nix: cannot realise %s for %s: %s",
                artifact.name,
                artifact.platform,
                result.describe_failure(),
            )
            return False

        built = set(result.stdout.split())
        expected = {artifact.path, artifact.lib_output}
        if not expected <= built:
            logger.warning("nix: %s built %s, expected %s", artifact.name, sorted(built), sorted(expected))
            return False
        return True
