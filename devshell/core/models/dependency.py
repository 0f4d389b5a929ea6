"""
Dependency models — resolved artifacts and the resolved environment.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Artifact(BaseModel):
    """A dependency name resolved to an installable output for a platform.

    ``path`` is the main output. ``lib`` is a separate library output,
    when the package splits one off; the linker should look there.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    platform: str
    version: str = ""
    path: str
    lib: str | None = None
    output: str = "out"             # name of the output at `path`

    @property
    def lib_output(self) -> str:
        return self.lib or self.path

    @property
    def library_dir(self) -> str:
        return f"{self.lib_output}/lib"

    @property
    def bin_dir(self) -> str:
        return f"{self.path}/bin"


class ResolvedEnvironment(BaseModel):
    """Every library and tool of a descriptor, resolved for one platform.

    Both lists keep the descriptor's order.
    """

    model_config = ConfigDict(frozen=True)

    platform: str
    libraries: list[Artifact] = Field(default_factory=list)
    tools: list[Artifact] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "platform": self.platform,
            "libraries": [a.model_dump() for a in self.libraries],
            "tools": [a.model_dump() for a in self.tools],
        }
