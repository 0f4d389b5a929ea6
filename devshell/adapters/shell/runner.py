"""
Command runner — the single place where external commands are spawned.

Adapters and catalogs never call ``subprocess`` themselves; they take a
runner so tests can swap in a fake that simulates rustup, cargo or nix.
"""

from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Keep the tail only; installers can be very chatty.
_OUTPUT_LIMIT = 4000


@dataclass
class CommandResult:
    """Outcome of one external command."""

    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0
    timed_out: bool = False
    error: str | None = None   # spawn failure (e.g. binary not found)

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out and self.error is None

    def describe_failure(self) -> str:
        if self.error:
            return self.error
        if self.timed_out:
            return f"Command timed out: {' '.join(self.command)}"
        return self.stderr.strip() or f"Command exited with code {self.returncode}"


CommandRunner = Callable[..., CommandResult]


def run_command(
    cmd: Sequence[str] | str,
    *,
    env: Mapping[str, str] | None = None,
    timeout: int = 120,
    discard_output: bool = False,
    shell: bool = False,
    stream: bool = False,
) -> CommandResult:
    """Run a command to completion and capture its result.

    Args:
        cmd: Argument list, or a string when ``shell`` is True.
        env: Full environment for the child; inherits ours when None.
        timeout: Seconds before the command is killed.
        discard_output: Send both streams to /dev/null (presence checks).
        shell: Run ``cmd`` through ``sh -c``.
        stream: Show the output live on our stderr instead of capturing
            it (long installs). Only the exit status is kept.

    Returns:
        CommandResult. Never raises for command failures; interrupts
        (``KeyboardInterrupt``) propagate.
    """
    argv = [cmd] if isinstance(cmd, str) else list(cmd)
    logger.debug("Executing: %s", " ".join(argv))

    if discard_output:
        streams = {"stdout": subprocess.DEVNULL, "stderr": subprocess.DEVNULL}
    elif stream:
        # both to fd 2, keeping stdout free for --json and shell-hook output
        streams = {"stdout": 2, "stderr": None}
    else:
        streams = {"capture_output": True}

    start = time.monotonic()
    try:
        proc = subprocess.run(
            cmd if shell else argv,
            shell=shell,
            env=dict(env) if env is not None else None,
            text=True,
            timeout=timeout,
            check=False,
            **streams,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Command timed out after %ds: %s", timeout, " ".join(argv))
        return CommandResult(
            command=argv,
            returncode=-1,
            elapsed_ms=int((time.monotonic() - start) * 1000),
            timed_out=True,
        )
    except OSError as e:
        return CommandResult(command=argv, returncode=127, error=f"Cannot run {argv[0]}: {e}")

    result = CommandResult(
        command=argv,
        returncode=proc.returncode,
        stdout=(proc.stdout or "")[-_OUTPUT_LIMIT:],
        stderr=(proc.stderr or "")[-_OUTPUT_LIMIT:],
        elapsed_ms=int((time.monotonic() - start) * 1000),
    )
    logger.debug("→ exit %d in %dms", result.returncode, result.elapsed_ms)
    return result


def run_interactive(cmd: Sequence[str], *, env: Mapping[str, str]) -> int:
    """Run ``cmd`` attached to our terminal and return its exit code."""
    logger.debug("Spawning: %s", " ".join(cmd))
    try:
        return subprocess.run(list(cmd), env=dict(env), check=False).returncode
    except OSError as e:
        logger.error("Cannot start %s: %s", cmd[0], e)
        return 127
