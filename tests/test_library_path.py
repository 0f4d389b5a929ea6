"""
Tests for library search path construction and the session environment.
"""

from devshell.core.models.dependency import Artifact, ResolvedEnvironment
from devshell.core.services.library_path import (
    build_session_env,
    make_library_path,
    missing_directories,
    prepend_path,
)
from devshell.core.services.resolver import resolve_environment


def _artifact(name: str, path: str, lib: str | None = None) -> Artifact:
    return Artifact(name=name, platform="p", path=path, lib=lib)


class TestMakeLibraryPath:
    def test_catalog_order(self):
        libs = [_artifact("gtk3", "/s/gtk3"), _artifact("cairo", "/s/cairo")]
        assert make_library_path(libs) == "/s/gtk3/lib:/s/cairo/lib"

    def test_uses_lib_output(self):
        libs = [_artifact("dbus", "/s/dbus", lib="/s/dbus-lib")]
        assert make_library_path(libs) == "/s/dbus-lib/lib"

    def test_repeats_dropped(self):
        libs = [_artifact("a", "/s/a"), _artifact("a2", "/s/a")]
        assert make_library_path(libs) == "/s/a/lib"

    def test_empty(self):
        assert make_library_path([]) == ""

    def test_deterministic(self, descriptor, catalog):
        resolved = resolve_environment(descriptor, "linux-x86_64", catalog)
        assert make_library_path(resolved.libraries) == make_library_path(resolved.libraries)


class TestPrependPath:
    def test_inherited_kept_as_suffix(self):
        assert prepend_path("/new/lib", "/old/lib:/older/lib") == "/new/lib:/old/lib:/older/lib"

    def test_no_trailing_separator(self):
        assert prepend_path("/new/lib", "") == "/new/lib"
        assert prepend_path("/new/lib", None) == "/new/lib"

    def test_nothing_new(self):
        assert prepend_path("", "/old/lib") == "/old/lib"

    def test_nested_sessions_compose(self):
        once = prepend_path("/new/lib", "/old/lib")
        twice = prepend_path("/new/lib", once)
        assert twice.endswith(once)


class TestBuildSessionEnv:
    def test_library_path(self, descriptor, catalog, base_env):
        resolved = resolve_environment(descriptor, "linux-x86_64", catalog)
        env = build_session_env(resolved, descriptor, base_env)

        value = env["LD_LIBRARY_PATH"]
        assert value.endswith(":/opt/inherited/lib")
        for artifact in resolved.libraries:
            assert artifact.library_dir in value
        assert value.startswith(resolved.libraries[0].library_dir)

    def test_tools_on_path(self, descriptor, catalog, base_env):
        resolved = resolve_environment(descriptor, "linux-x86_64", catalog)
        env = build_session_env(resolved, descriptor, base_env)
        path = env["PATH"].split(":")
        assert path[-1] == base_env["PATH"]
        assert resolved.tools[0].bin_dir in path

    def test_base_env_untouched(self, descriptor, catalog, base_env):
        snapshot = dict(base_env)
        resolved = resolve_environment(descriptor, "linux-x86_64", catalog)
        env = build_session_env(resolved, descriptor, base_env)
        assert base_env == snapshot
        assert env["HOME"] == "/tmp"

    def test_custom_variable(self, catalog):
        from devshell.core.models.descriptor import EnvironmentDescriptor

        d = EnvironmentDescriptor(name="x", libraries=["glib"], library_path_var="DYLD_LIBRARY_PATH")
        resolved = resolve_environment(d, "linux-x86_64", catalog)
        env = build_session_env(resolved, d, {})
        assert env["DYLD_LIBRARY_PATH"] == resolved.libraries[0].library_dir
        assert "LD_LIBRARY_PATH" not in env

    def test_no_tools_keeps_path(self):
        from devshell.core.models.descriptor import EnvironmentDescriptor

        resolved = ResolvedEnvironment(platform="p")
        env = build_session_env(resolved, EnvironmentDescriptor(name="x"), {"PATH": "/usr/bin"})
        assert env["PATH"] == "/usr/bin"
        assert env["LD_LIBRARY_PATH"] == ""


class TestMissingDirectories:
    def test_reports_absent_only(self, tmp_path):
        (tmp_path / "glib" / "lib").mkdir(parents=True)
        (tmp_path / "nodejs").mkdir()
        resolved = ResolvedEnvironment(
            platform="p",
            libraries=[
                _artifact("glib", str(tmp_path / "glib")),
                _artifact("gtk3", str(tmp_path / "gtk3")),
            ],
            tools=[_artifact("nodejs", str(tmp_path / "nodejs")), _artifact("gh", "/nonexistent/gh")],
        )
        assert missing_directories(resolved) == [str(tmp_path / "gtk3" / "lib"), "/nonexistent/gh"]

    def test_repeats_reported_once(self):
        lib = _artifact("a", "/nonexistent/a")
        resolved = ResolvedEnvironment(platform="p", libraries=[lib, lib])
        assert missing_directories(resolved) == ["/nonexistent/a/lib"]
