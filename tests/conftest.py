"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from devshell.adapters.catalog.static import StaticCatalog
from devshell.adapters.registry import default_registry
from devshell.core.config.loader import default_descriptor

from tests.fakes import FakeToolchain


@pytest.fixture
def fake_toolchain() -> FakeToolchain:
    return FakeToolchain()


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """A directory with executable rustup/cargo stubs for PATH lookups."""
    path = tmp_path / "bin"
    path.mkdir()
    for name in ("rustup", "cargo"):
        stub = path / name
        stub.write_text("#!/bin/sh\nexit 0\n")
        stub.chmod(0o755)
    return path


@pytest.fixture
def base_env(bin_dir: Path) -> dict[str, str]:
    """Inherited environment for a session under test."""
    return {"PATH": str(bin_dir), "LD_LIBRARY_PATH": "/opt/inherited/lib", "HOME": "/tmp"}


@pytest.fixture
def descriptor():
    return default_descriptor()


@pytest.fixture
def catalog() -> StaticCatalog:
    return StaticCatalog.builtin()


@pytest.fixture
def registry(fake_toolchain: FakeToolchain):
    return default_registry(runner=fake_toolchain)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """setup_logging() replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
