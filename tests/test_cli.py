"""
Tests for CLI commands — resolution, bootstrap, enter, and global options.
"""

import json
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from devshell.main import cli


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path: Path):
    for var in (
        "DEVSHELL_PLATFORM",
        "DEVSHELL_CATALOG_FILE",
        "DEVSHELL_LOG_LEVEL",
        "DEVSHELL_LOG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)
    # pinned data; the nix default would shell out to nix
    monkeypatch.setenv("DEVSHELL_CATALOG", "static")
    monkeypatch.chdir(tmp_path)


def _invoke(*args: str):
    return CliRunner().invoke(cli, list(args), obj={})


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        result = _invoke("--help")
        assert result.exit_code == 0
        assert "devshell" in result.output

    def test_version(self):
        result = _invoke("--version")
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_unknown_catalog_kind(self):
        result = _invoke("--catalog", "apt", "resolve")
        assert result.exit_code == 2

    def test_catalog_gets_descriptor_timeouts(self, monkeypatch, tmp_path: Path):
        from devshell.adapters.catalog import StaticCatalog

        seen = {}

        def fake_build_catalog(kind, **kwargs):
            seen.update(kwargs, kind=kind)
            return StaticCatalog.builtin()

        monkeypatch.setattr("devshell.adapters.catalog.build_catalog", fake_build_catalog)
        (tmp_path / "devshell.yml").write_text(
            "name: x\nlibraries: [glib]\ncommand_timeout: 30\ninstall_timeout: 900\n"
        )
        result = _invoke("--catalog", "nix", "--mock", "bootstrap", "-p", "linux-x86_64")
        assert result.exit_code == 0, result.output
        assert seen["kind"] == "nix"
        assert seen["timeout"] == 30
        assert seen["build_timeout"] == 900
        assert seen["realise"] is True

    def test_resolve_does_not_realise(self, monkeypatch):
        from devshell.adapters.catalog import StaticCatalog

        seen = {}

        def fake_build_catalog(kind, **kwargs):
            seen.update(kwargs)
            return StaticCatalog.builtin()

        monkeypatch.setattr("devshell.adapters.catalog.build_catalog", fake_build_catalog)
        assert _invoke("--catalog", "nix", "resolve", "-p", "linux-x86_64").exit_code == 0
        assert seen["realise"] is False


class TestResolveCommand:
    def test_resolve_json(self):
        result = _invoke("resolve", "--platform", "linux-x86_64", "--json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["ok"] is True
        assert data["platform"] == "linux-x86_64"
        assert [lib["name"] for lib in data["libraries"]][:2] == ["webkitgtk", "gtk3"]

    def test_resolve_text(self):
        result = _invoke("resolve", "-p", "linux-aarch64")
        assert result.exit_code == 0
        assert "scriptdeck" in result.output
        assert "webkitgtk" in result.output

    def test_unresolvable_platform(self):
        result = _invoke("resolve", "--platform", "darwin-aarch64")
        assert result.exit_code == 1
        assert "webkitgtk" in result.output

    def test_unresolvable_platform_json(self):
        result = _invoke("resolve", "--platform", "plan9-mips", "--json")
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["ok"] is False
        assert "glib" in data["missing"]

    def test_platform_from_env(self, monkeypatch):
        monkeypatch.setenv("DEVSHELL_PLATFORM", "linux-aarch64")
        result = _invoke("resolve", "--json")
        assert json.loads(result.output)["platform"] == "linux-aarch64"


class TestLibraryPathCommand:
    def test_no_inherit(self):
        result = _invoke("library-path", "-p", "linux-x86_64", "--no-inherit")
        assert result.exit_code == 0
        value = result.output.strip()
        assert value.startswith("/nix/store/")
        assert value.endswith("/lib")
        assert "::" not in value

    def test_inherits(self, monkeypatch):
        monkeypatch.setenv("LD_LIBRARY_PATH", "/opt/old/lib")
        result = _invoke("library-path", "-p", "linux-x86_64")
        assert result.output.strip().endswith(":/opt/old/lib")

    def test_catalog_file(self, tmp_path: Path):
        catalog = tmp_path / "catalog.yml"
        catalog.write_text(textwrap.dedent("""\
            linux-x86_64:
              glib: {path: /store/glib}
        """))
        config = tmp_path / "devshell.yml"
        config.write_text("name: tiny\nlibraries: [glib]\n")
        result = _invoke(
            "--config", str(config), "--catalog-file", str(catalog),
            "library-path", "-p", "linux-x86_64", "--no-inherit",
        )
        assert result.exit_code == 0
        assert result.output.strip() == "/store/glib/lib"


class TestBootstrapCommand:
    def test_mock_json(self):
        result = _invoke("--mock", "bootstrap", "-p", "linux-x86_64", "--json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["status"] == "ok"
        assert [r["action_id"] for r in data["receipts"]] == [
            "toolchain-default",
            "target:wasm32-unknown-unknown",
            "component:rust-analyzer",
            "extension:tauri",
        ]

    def test_mock_text(self):
        result = _invoke("--mock", "bootstrap", "-p", "linux-x86_64")
        assert result.exit_code == 0
        assert "Result: 4/4 succeeded" in result.output

    def test_unresolvable_runs_nothing(self):
        result = _invoke("--mock", "bootstrap", "-p", "plan9-mips")
        assert result.exit_code == 1
        assert "Cannot resolve" in result.output


class TestEnterCommand:
    def test_spawns_shell(self, monkeypatch):
        seen = {}

        def fake_interactive(cmd, *, env):
            seen["cmd"] = cmd
            seen["env"] = env
            return 0

        monkeypatch.setattr("devshell.core.use_cases.enter.run_interactive", fake_interactive)
        result = _invoke("--mock", "enter", "-p", "linux-x86_64", "--shell", "/bin/bash")
        assert result.exit_code == 0
        assert seen["cmd"] == ["/bin/bash"]
        assert seen["env"]["LD_LIBRARY_PATH"].startswith("/nix/store/")

    def test_shell_exit_code_propagates(self, monkeypatch):
        monkeypatch.setattr(
            "devshell.core.use_cases.enter.run_interactive", lambda cmd, *, env: 3
        )
        result = _invoke("--mock", "enter", "-p", "linux-x86_64")
        assert result.exit_code == 3

    def test_unknown_platform_fails_before_shell(self, monkeypatch):
        def boom(cmd, *, env):
            raise AssertionError("shell must not start")

        monkeypatch.setattr("devshell.core.use_cases.enter.run_interactive", boom)
        result = _invoke("--mock", "enter", "-p", "plan9-mips")
        assert result.exit_code == 1
        assert "Cannot resolve" in result.output

    def test_dry_run(self):
        result = _invoke("enter", "-p", "linux-x86_64", "--dry-run", "--no-bootstrap")
        assert result.exit_code == 0
        assert "LD_LIBRARY_PATH=/nix/store/" in result.output


class TestShellHookCommand:
    def test_prints_fragment(self):
        result = _invoke("shell-hook", "-p", "linux-x86_64")
        assert result.exit_code == 0
        assert "export LD_LIBRARY_PATH=" in result.output
        assert "cargo install tauri-cli" in result.output


class TestPlatformsCommand:
    def test_json(self):
        result = _invoke("platforms", "--json")
        assert result.exit_code == 0
        rows = {r["platform"]: r for r in json.loads(result.output)}
        assert rows["linux-x86_64"]["ok"] and rows["linux-x86_64"]["supported"]
        assert rows["linux-aarch64"]["ok"]
        assert not rows["darwin-aarch64"]["ok"]
        assert not rows["darwin-aarch64"]["supported"]

    def test_text(self):
        result = _invoke("platforms")
        assert result.exit_code == 0
        assert "linux-x86_64 (supported)" in result.output


class TestDoctorCommand:
    def test_json(self):
        result = _invoke("doctor", "--json")
        assert result.exit_code == 0
        assert set(json.loads(result.output)) == {"rustup", "cargo-extension", "shell"}


class TestConfigCheckCommand:
    def test_builtin_valid(self):
        result = _invoke("config", "check")
        assert result.exit_code == 0
        assert "Configuration is valid" in result.output
        assert "built-in" in result.output

    def test_unresolvable_supported_platform(self, tmp_path: Path):
        config = tmp_path / "devshell.yml"
        config.write_text(textwrap.dedent("""\
            name: mac-too
            platforms: [linux-x86_64, darwin-aarch64]
            libraries: [webkitgtk]
        """))
        result = _invoke("--config", str(config), "config", "check", "--json")
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["valid"] is False
        assert any("darwin-aarch64" in e for e in data["errors"])

    def test_invalid_yaml(self, tmp_path: Path):
        config = tmp_path / "devshell.yml"
        config.write_text("name: [unclosed\n")
        result = _invoke("--config", str(config), "config", "check")
        assert result.exit_code == 1
        assert "Configuration errors" in result.output
