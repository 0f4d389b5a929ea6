"""
Configuration loader — reads devshell.yml and catalog files.

The descriptor file is optional: without one the built-in environment
is used. A file, when present, must be a valid descriptor; nothing is
merged silently.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from devshell.core.data import get_registry
from devshell.core.models.descriptor import EnvironmentDescriptor

logger = logging.getLogger(__name__)

# Default config filename
DESCRIPTOR_FILE = "devshell.yml"

# Environment overrides
ENV_PLATFORM = "DEVSHELL_PLATFORM"
ENV_CATALOG = "DEVSHELL_CATALOG"
ENV_CATALOG_FILE = "DEVSHELL_CATALOG_FILE"

CATALOG_KINDS = ("static", "nix")


class ConfigError(Exception):
    """Raised when a descriptor or catalog file is invalid or unreadable."""


def find_descriptor_file(start_dir: Path | None = None) -> Path | None:
    """Search for devshell.yml starting from the given directory, walking up.

    Returns:
        Path to devshell.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / DESCRIPTOR_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def _read_yaml_mapping(path: Path) -> dict:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def default_descriptor() -> EnvironmentDescriptor:
    """The built-in environment shipped with the package."""
    return EnvironmentDescriptor.model_validate(get_registry().default_environment_copy())


def load_descriptor(path: Path | None = None, search: bool = True) -> EnvironmentDescriptor:
    """Load and validate the environment descriptor.

    Args:
        path: Explicit path to devshell.yml.
        search: When no path is given, look upward from the cwd first.

    Returns:
        The descriptor from the file, or the built-in one if no file exists.

    Raises:
        ConfigError: If an explicit or discovered file is invalid.
    """
    if path is None and search:
        path = find_descriptor_file()

    if path is None:
        logger.debug("No %s found, using built-in environment", DESCRIPTOR_FILE)
        return default_descriptor()

    logger.debug("Loading environment descriptor from %s", path)
    data = _read_yaml_mapping(path)

    # Allow the manifest to be wrapped under an "environment" key
    if isinstance(data.get("environment"), dict):
        data = data["environment"]

    try:
        descriptor = EnvironmentDescriptor.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid environment descriptor in {path}: {e}") from e

    logger.info(
        "Loaded environment '%s' (%d libraries, %d tools)",
        descriptor.name,
        len(descriptor.libraries),
        len(descriptor.tools),
    )
    return descriptor


def load_catalog_file(path: Path) -> dict[str, dict[str, dict]]:
    """Load a package catalog file: ``platform -> name -> entry``.

    Each entry needs a ``path``; ``version`` and ``lib`` are optional.

    Raises:
        ConfigError: On unreadable files or malformed entries.
    """
    data = _read_yaml_mapping(path)

    for platform, packages in data.items():
        if not isinstance(packages, dict):
            raise ConfigError(f"Catalog {path}: platform '{platform}' must map names to entries")
        for name, entry in packages.items():
            if not isinstance(entry, dict) or not entry.get("path"):
                raise ConfigError(f"Catalog {path}: '{platform}/{name}' has no 'path'")

    logger.info("Loaded catalog file %s (%d platforms)", path, len(data))
    return data


def catalog_kind_from_env(default: str = "nix") -> str:
    """Catalog backend selected by DEVSHELL_CATALOG."""
    kind = os.environ.get(ENV_CATALOG, default).strip().lower() or default
    if kind not in CATALOG_KINDS:
        raise ConfigError(
            f"Unknown catalog '{kind}' in {ENV_CATALOG} (expected one of: {', '.join(CATALOG_KINDS)})"
        )
    return kind


def catalog_file_from_env() -> Path | None:
    value = os.environ.get(ENV_CATALOG_FILE)
    return Path(value) if value else None


def platform_from_env() -> str | None:
    value = os.environ.get(ENV_PLATFORM, "").strip()
    return value or None
