"""
Environment descriptor — the declarative manifest of a dev shell.

Loaded from devshell.yml (or the built-in default), this is everything
the provisioner knows: which platforms are supported, which libraries
and tools to resolve, and how to bootstrap the toolchain.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _unique(names: list[str]) -> list[str]:
    """Drop blanks and repeats, keep first-seen order."""
    seen: set[str] = set()
    result = []
    for name in names:
        name = name.strip()
        if name and name not in seen:
            seen.add(name)
            result.append(name)
    return result


class ToolchainSettings(BaseModel):
    """Toolchain manager bootstrap: default channel, targets, components."""

    model_config = ConfigDict(frozen=True)

    manager: str = "rustup"
    channel: str = "nightly"
    targets: list[str] = Field(default_factory=lambda: ["wasm32-unknown-unknown"])
    components: list[str] = Field(default_factory=lambda: ["rust-analyzer"])

    @field_validator("targets", "components")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return _unique(value)


class CliExtension(BaseModel):
    """An auxiliary CLI extension, checked via ``<host> help <name>``.

    If that check fails it is installed with ``<host> install <package>``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    package: str
    host: str = "cargo"

    @property
    def check_command(self) -> list[str]:
        return [self.host, "help", self.name]

    @property
    def install_command(self) -> list[str]:
        return [self.host, "install", self.package]


class EnvironmentDescriptor(BaseModel):
    """Root manifest of one development environment."""

    model_config = ConfigDict(frozen=True)

    version: int = 1

    name: str
    description: str = ""

    platforms: list[str] = Field(default_factory=list)
    libraries: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)

    toolchain: ToolchainSettings = Field(default_factory=ToolchainSettings)
    extensions: list[CliExtension] = Field(default_factory=list)
    shell_hook: list[str] = Field(default_factory=list)

    library_path_var: str = "LD_LIBRARY_PATH"
    continue_on_error: bool = False
    command_timeout: int = Field(default=120, gt=0)
    install_timeout: int = Field(default=600, gt=0)

    @field_validator("platforms", "libraries", "tools")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return _unique(value)

    @field_validator("library_path_var")
    @classmethod
    def _valid_var(cls, value: str) -> str:
        if not value or not value.replace("_", "").isalnum():
            raise ValueError(f"not a valid environment variable name: {value!r}")
        return value

    def supports(self, platform: str) -> bool:
        return platform in self.platforms

    def dependency_names(self) -> list[str]:
        """Libraries then tools, each name once."""
        return _unique([*self.libraries, *self.tools])
