"""
Shell command adapter — run the descriptor's extra shell-hook lines.

Each line runs through ``sh -c`` in the session environment, the same
way the lines of a shell hook would.
"""

from __future__ import annotations

import logging

from devshell.adapters.base import CommandAdapter, ExecutionContext
from devshell.core.models.action import Receipt

logger = logging.getLogger(__name__)


class ShellCommandAdapter(CommandAdapter):
    """Execute a shell command line and capture output.

    Action params:
        command (str): The command line to execute.
    """

    binary = "sh"

    @property
    def name(self) -> str:
        return "shell"

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        if not context.action.params.get("command", "").strip():
            return False, "Missing required param: 'command'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        command = context.action.params["command"]
        logger.debug("Shell hook: %s", command)
        receipt = self._run(context, command, shell=True)
        # A hook line may or may not change anything; assume it does.
        receipt.changed = receipt.ok
        return receipt
