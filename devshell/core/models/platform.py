"""
Platform model — the OS/architecture key that selects package builds.

Identifiers are written ``<os>-<arch>`` (``linux-x86_64``). They are
otherwise opaque: a catalog either knows an identifier or it doesn't.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class Platform(BaseModel):
    """An immutable platform identifier for one session."""

    model_config = ConfigDict(frozen=True)

    identifier: str

    @field_validator("identifier")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("platform identifier must not be empty")
        return value

    @property
    def os(self) -> str:
        return self.identifier.split("-", 1)[0]

    @property
    def arch(self) -> str:
        parts = self.identifier.split("-", 1)
        return parts[1] if len(parts) == 2 else ""

    @property
    def nix_system(self) -> str:
        """The Nix system double, e.g. ``x86_64-linux``."""
        if not self.arch:
            return self.identifier
        return f"{self.arch}-{self.os}"

    def __str__(self) -> str:
        return self.identifier
