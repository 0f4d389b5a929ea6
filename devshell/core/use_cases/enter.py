"""
Enter use case — resolve, build the environment, bootstrap, spawn a shell.

    prepare_session()  everything up to the shell; raises on hard failure
    spawn_shell()      hand control to an interactive shell

Nothing here touches the CLI's own ``os.environ``; the session
environment is a separate mapping handed to every child process.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from devshell.adapters.catalog.base import PackageCatalog
from devshell.adapters.registry import AdapterRegistry
from devshell.adapters.shell.runner import run_interactive
from devshell.core.engine.executor import (
    ExecutionReport,
    build_bootstrap_plan,
    execute_plan,
)
from devshell.core.models.dependency import ResolvedEnvironment
from devshell.core.models.descriptor import EnvironmentDescriptor
from devshell.core.services.library_path import build_session_env, missing_directories
from devshell.core.services.resolver import resolve_environment

logger = logging.getLogger(__name__)


class BootstrapError(Exception):
    """The bootstrap sequence failed under the fail-fast policy."""

    def __init__(self, report: ExecutionReport):
        self.report = report
        failure = report.first_failure()
        detail = f"{failure.action_id}: {failure.error}" if failure else "unknown failure"
        super().__init__(f"Bootstrap failed at {detail}")


@dataclass
class Session:
    """A prepared session, ready to hand to a shell."""

    descriptor: EnvironmentDescriptor
    resolved: ResolvedEnvironment
    env: dict[str, str]
    report: ExecutionReport | None = None

    @property
    def platform(self) -> str:
        return self.resolved.platform

    @property
    def library_path(self) -> str:
        return self.env.get(self.descriptor.library_path_var, "")


def run_bootstrap(
    descriptor: EnvironmentDescriptor,
    registry: AdapterRegistry,
    env: dict[str, str],
    dry_run: bool = False,
    continue_on_error: bool | None = None,
) -> ExecutionReport:
    """Run the descriptor's bootstrap sequence in ``env``."""
    keep_going = descriptor.continue_on_error if continue_on_error is None else continue_on_error
    plan = build_bootstrap_plan(descriptor)
    logger.info("Bootstrap %s: %d actions", plan.operation_id, len(plan))
    return execute_plan(
        plan,
        registry,
        env=env,
        dry_run=dry_run,
        continue_on_error=keep_going,
        timeout=descriptor.command_timeout,
    )


def prepare_session(
    descriptor: EnvironmentDescriptor,
    platform: str,
    catalog: PackageCatalog,
    registry: AdapterRegistry,
    base_env: Mapping[str, str] | None = None,
    bootstrap: bool = True,
    dry_run: bool = False,
    continue_on_error: bool | None = None,
) -> Session:
    """Build the session for ``platform``.

    Raises:
        ResolutionError: A dependency is missing; nothing was run.
        BootstrapError: A bootstrap action failed and the policy is fail-fast.
    """
    if not descriptor.supports(platform):
        logger.warning("Platform %s is not listed as supported by '%s'", platform, descriptor.name)

    resolved = resolve_environment(descriptor, platform, catalog)
    if not catalog.realises:
        missing = missing_directories(resolved)
        if missing:
            logger.warning(
                "%d resolved path(s) from the %s catalog are not on disk, e.g. %s",
                len(missing),
                catalog.name,
                missing[0],
            )
    env = build_session_env(resolved, descriptor, os.environ if base_env is None else base_env)
    session = Session(descriptor=descriptor, resolved=resolved, env=env)

    if not bootstrap:
        return session

    report = run_bootstrap(descriptor, registry, env, dry_run=dry_run, continue_on_error=continue_on_error)
    session.report = report

    if report.halted_at is not None:
        raise BootstrapError(report)
    if not report.all_ok:
        logger.warning(
            "Bootstrap finished with %d failed action(s); entering anyway", report.failed
        )
    return session


def shell_command(env: Mapping[str, str], shell: str | None = None) -> list[str]:
    """The interactive shell to spawn: explicit, then $SHELL, then sh."""
    return [shell or env.get("SHELL") or "/bin/sh"]


def spawn_shell(session: Session, shell: str | None = None) -> int:
    """Run an interactive shell in the session environment.

    Returns:
        The shell's exit code.
    """
    argv = shell_command(session.env, shell)
    logger.info("Entering %s for %s", " ".join(argv), session.platform)
    return run_interactive(argv, env=session.env)
