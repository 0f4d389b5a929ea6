"""
Adapter base — the protocol contract between engine and tools.

The engine only talks to adapters through this protocol, never
directly to rustup, cargo or a shell.
"""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from devshell.adapters.shell.runner import CommandRunner, run_command
from devshell.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to execute an action.

    ``env`` is the full session environment the command runs in. Empty
    means the current process environment.
    """

    action: Action
    env: dict[str, str] = Field(default_factory=dict)
    dry_run: bool = False
    timeout: int = 120

    def which(self, binary: str) -> str | None:
        """Locate ``binary`` on the session PATH."""
        return shutil.which(binary, path=self.env.get("PATH"))


class Adapter(ABC):
    """Abstract base class for all adapters.

    Adapters perform external side effects and return receipts.
    They NEVER raise exceptions — failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'shell', 'rustup')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this adapter's underlying tool is available."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Validate that the action can be executed.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Execute the action and return a receipt."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class CommandAdapter(Adapter):
    """Base for adapters that drive one external binary."""

    binary: str = ""

    def __init__(self, runner: CommandRunner | None = None):
        self._runner = runner or run_command

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None

    def _require_binary(self, context: ExecutionContext) -> tuple[bool, str]:
        if context.which(self.binary) is None:
            return False, f"'{self.binary}' not found on the session PATH"
        return True, ""

    def _run(self, context: ExecutionContext, argv: list[str] | str, **kwargs) -> Receipt:
        """Run ``argv`` in the session environment and wrap the result."""
        result = self._runner(
            argv,
            env=context.env or None,
            timeout=kwargs.pop("timeout", context.timeout),
            **kwargs,
        )
        metadata = {"command": argv, "return_code": result.returncode}
        if result.ok:
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=(result.stdout or result.stderr).strip(),
                duration_ms=result.elapsed_ms,
                metadata={**metadata, "stderr": result.stderr.strip()},
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=context.action.id,
            error=result.describe_failure(),
            duration_ms=result.elapsed_ms,
            metadata={**metadata, "stdout": result.stdout.strip()},
        )
