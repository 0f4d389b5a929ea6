"""
Shell hook rendering — the activation as a POSIX sh fragment.

For ``eval "$(devshell shell-hook)"`` inside an existing shell. The
inherited search path is expanded by the shell at eval time, so the
fragment composes with whatever the caller already has.
"""

from __future__ import annotations

import shlex

from devshell.adapters.toolchain.rustup import RustupAdapter
from devshell.core.models.dependency import ResolvedEnvironment
from devshell.core.models.descriptor import EnvironmentDescriptor
from devshell.core.services.library_path import SEPARATOR, make_library_path


def _export_prepend(var: str, value: str) -> str:
    # ${VAR:+:$VAR} appends the old value only when it is set and non-empty
    return f'export {var}={shlex.quote(value)}"${{{var}:+{SEPARATOR}${var}}}"'


def render_shell_hook(
    descriptor: EnvironmentDescriptor,
    resolved: ResolvedEnvironment,
) -> str:
    lines = [f"# devshell: {descriptor.name} ({resolved.platform})"]

    library_path = make_library_path(resolved.libraries)
    if library_path:
        lines.append(_export_prepend(descriptor.library_path_var, library_path))

    tool_bins = SEPARATOR.join(dict.fromkeys(a.bin_dir for a in resolved.tools))
    if tool_bins:
        lines.append(_export_prepend("PATH", tool_bins))

    toolchain = descriptor.toolchain
    if toolchain.manager == "rustup":
        commands = [RustupAdapter.command_for("default", toolchain.channel)]
        commands += [RustupAdapter.command_for("target", t) for t in toolchain.targets]
        commands += [RustupAdapter.command_for("component", c) for c in toolchain.components]
        lines.extend(shlex.join(cmd) for cmd in commands)

    for ext in descriptor.extensions:
        lines.append(
            f"{shlex.join(ext.check_command)} 2>/dev/null 1>/dev/null"
            f" || {shlex.join(ext.install_command)}"
        )

    lines.extend(descriptor.shell_hook)
    return "\n".join(lines) + "\n"
