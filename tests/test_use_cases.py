"""
Tests for the side-effect-free use cases: resolve, platforms, config check.
"""

import textwrap
from pathlib import Path

from devshell.core.models.descriptor import EnvironmentDescriptor
from devshell.core.use_cases.config_check import check_config
from devshell.core.use_cases.resolve import check_platforms, resolve_for


class TestResolveFor:
    def test_ok(self, descriptor, catalog):
        result = resolve_for(descriptor, "linux-x86_64", catalog)
        assert result.ok
        assert result.supported
        assert result.library_path.startswith("/nix/store/")
        assert result.to_dict()["library_path"] == result.library_path

    def test_missing(self, descriptor, catalog):
        result = resolve_for(descriptor, "darwin-x86_64", catalog)
        assert not result.ok
        assert not result.supported
        assert "webkitgtk" in result.missing
        assert result.to_dict()["missing"] == result.missing


class TestCheckPlatforms:
    def test_supported_first(self, descriptor, catalog):
        results = check_platforms(descriptor, catalog)
        assert [r.platform for r in results[:2]] == descriptor.platforms
        assert {r.platform for r in results} >= {"darwin-x86_64", "darwin-aarch64"}

    def test_only_linux_resolves(self, descriptor, catalog):
        ok = {r.platform for r in check_platforms(descriptor, catalog) if r.ok}
        assert ok == {"linux-x86_64", "linux-aarch64"}

    def test_no_repeats(self, catalog):
        d = EnvironmentDescriptor(name="x", platforms=["linux-x86_64"])
        platforms = [r.platform for r in check_platforms(d, catalog)]
        assert len(platforms) == len(set(platforms))


class TestCheckConfig:
    def _write(self, tmp_path: Path, body: str) -> Path:
        path = tmp_path / "devshell.yml"
        path.write_text(textwrap.dedent(body))
        return path

    def test_builtin(self, tmp_path: Path, monkeypatch, catalog):
        monkeypatch.chdir(tmp_path)
        result = check_config(catalog=catalog)
        assert result.valid
        assert result.builtin
        assert result.errors == []

    def test_warnings(self, tmp_path: Path):
        path = self._write(tmp_path, "name: bare\n")
        result = check_config(path)
        assert result.valid
        assert len(result.warnings) == 2

    def test_unknown_manager(self, tmp_path: Path):
        path = self._write(tmp_path, """\
            name: x
            toolchain:
              manager: asdf
        """)
        result = check_config(path)
        assert not result.valid
        assert "asdf" in result.errors[0]

    def test_duplicate_extensions(self, tmp_path: Path):
        path = self._write(tmp_path, """\
            name: x
            extensions:
              - {name: tauri, package: tauri-cli}
              - {name: tauri, package: tauri-cli}
        """)
        result = check_config(path)
        assert not result.valid
        assert "Duplicate extensions: tauri" in result.errors

    def test_supported_platform_must_resolve(self, tmp_path: Path, catalog):
        path = self._write(tmp_path, """\
            name: x
            platforms: [darwin-x86_64]
            libraries: [webkitgtk]
        """)
        result = check_config(path, catalog=catalog)
        assert not result.valid
        assert "darwin-x86_64" in result.errors[0]

    def test_unreadable(self, tmp_path: Path):
        result = check_config(tmp_path / "nope.yml")
        assert not result.valid
        assert result.descriptor is None
        assert result.to_dict()["environment"] is None
