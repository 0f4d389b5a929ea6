"""
Package catalog protocol — (name, platform) → Artifact.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from devshell.core.models.dependency import Artifact


class PackageCatalog(ABC):
    """Resolves dependency names to installable artifacts per platform.

    ``lookup`` returns None for a name the catalog cannot resolve; the
    resolver decides what a miss means.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Catalog identifier ('static', 'nix')."""

    @abstractmethod
    def lookup(self, name: str, platform: str) -> Artifact | None:
        """Resolve one name for one platform."""

    @abstractmethod
    def platforms(self) -> list[str]:
        """Platform identifiers this catalog has builds for."""

    @property
    def realises(self) -> bool:
        """Whether resolved paths are guaranteed to exist on this host."""
        return False

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
