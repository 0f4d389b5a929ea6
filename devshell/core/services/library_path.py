"""
Library search path construction and the session environment.

Pure functions: the same resolved set and inherited value always yield
the same string. New entries are prepended; an inherited value is kept
intact as the suffix so nested shells compose instead of clobbering.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping

from devshell.core.models.dependency import Artifact, ResolvedEnvironment
from devshell.core.models.descriptor import EnvironmentDescriptor

SEPARATOR = ":"


def make_library_path(libraries: Iterable[Artifact]) -> str:
    """Join each library's ``lib`` directory, catalog order, no repeats."""
    seen: set[str] = set()
    entries = []
    for artifact in libraries:
        if artifact.library_dir not in seen:
            seen.add(artifact.library_dir)
            entries.append(artifact.library_dir)
    return SEPARATOR.join(entries)


def prepend_path(new: str, inherited: str | None) -> str:
    """``new`` in front of ``inherited``; no dangling separator when either is empty."""
    if not inherited:
        return new
    if not new:
        return inherited
    return f"{new}{SEPARATOR}{inherited}"


def missing_directories(resolved: ResolvedEnvironment) -> list[str]:
    """Library dirs and tool outputs of ``resolved`` that are not on disk."""
    wanted = [a.library_dir for a in resolved.libraries] + [a.path for a in resolved.tools]
    return [path for path in dict.fromkeys(wanted) if not os.path.isdir(path)]


def build_session_env(
    resolved: ResolvedEnvironment,
    descriptor: EnvironmentDescriptor,
    base_env: Mapping[str, str],
) -> dict[str, str]:
    """The environment of the spawned session.

    Returns a new mapping; ``base_env`` is not modified. The library
    search path gets the resolved libraries, PATH gets the tools'
    ``bin`` directories, the way the package manager's shell exposes
    its build inputs.
    """
    env = dict(base_env)
    var = descriptor.library_path_var
    env[var] = prepend_path(make_library_path(resolved.libraries), base_env.get(var))

    tool_bins = SEPARATOR.join(dict.fromkeys(a.bin_dir for a in resolved.tools))
    env["PATH"] = prepend_path(tool_bins, base_env.get("PATH"))
    return env
