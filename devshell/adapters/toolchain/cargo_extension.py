"""
Cargo extension adapter — idempotent install of a cargo subcommand.

``ensure_installed`` is check-then-act: run ``cargo help <ext>`` with
both streams discarded, and only if that fails run
``cargo install <package>``. It is not atomic. A stale binary that
answers the help check counts as present. ``cargo install`` is itself safe
to rerun.
"""

from __future__ import annotations

import logging
from enum import Enum

from devshell.adapters.base import CommandAdapter, ExecutionContext
from devshell.core.models.action import Receipt
from devshell.core.models.descriptor import CliExtension

logger = logging.getLogger(__name__)


class InstallOutcome(str, Enum):
    ALREADY_PRESENT = "already_present"
    INSTALLED = "installed"
    FAILED = "failed"


class CargoExtensionAdapter(CommandAdapter):
    """Ensure a cargo extension is installed.

    Action params:
        name (str): subcommand name, e.g. ``tauri``.
        package (str): crate to install, e.g. ``tauri-cli``.
        host (str): host binary (default ``cargo``).
        install_timeout (int): seconds allowed for the install.
    """

    binary = "cargo"

    @property
    def name(self) -> str:
        return "cargo-extension"

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        if not params.get("name") or not params.get("package"):
            return False, "Missing required params: 'name' and 'package'"
        host = params.get("host", self.binary)
        if context.which(host) is None:
            return False, f"'{host}' not found on the session PATH"
        return True, ""

    def is_installed(self, extension: CliExtension, context: ExecutionContext) -> bool:
        """True when ``<host> help <name>`` succeeds."""
        result = self._runner(
            extension.check_command,
            env=context.env or None,
            timeout=context.timeout,
            discard_output=True,
        )
        return result.ok

    def ensure_installed(
        self,
        extension: CliExtension,
        context: ExecutionContext,
        install_timeout: int = 600,
    ) -> tuple[InstallOutcome, Receipt]:
        """Install ``extension`` unless the help check finds it."""
        if self.is_installed(extension, context):
            logger.debug("%s %s already present", extension.host, extension.name)
            return InstallOutcome.ALREADY_PRESENT, Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=f"{extension.host} {extension.name} already present",
                metadata={"outcome": InstallOutcome.ALREADY_PRESENT.value},
            )

        logger.info("Installing %s (%s)", extension.package, " ".join(extension.install_command))
        receipt = self._run(context, extension.install_command, timeout=install_timeout, stream=True)
        outcome = InstallOutcome.INSTALLED if receipt.ok else InstallOutcome.FAILED
        receipt.changed = receipt.ok
        receipt.metadata["outcome"] = outcome.value
        if not receipt.ok:
            logger.warning("Installing %s failed: %s", extension.package, receipt.error)
        return outcome, receipt

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        extension = CliExtension(
            name=params["name"],
            package=params["package"],
            host=params.get("host", self.binary),
        )
        _, receipt = self.ensure_installed(
            extension,
            context,
            install_timeout=params.get("install_timeout", 600),
        )
        return receipt
