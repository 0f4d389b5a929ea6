"""
Engine executor — builds and runs the bootstrap sequence.

Flow:
    descriptor → plan (ordered actions) → execute one by one → report

Actions run strictly in order. The default policy is fail-fast: after
the first failed action the rest are recorded as skipped. With
``continue_on_error`` every action runs regardless, like a shell hook
without ``set -e``.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime

from devshell.adapters.registry import AdapterRegistry
from devshell.core.models.action import Action, Receipt
from devshell.core.models.descriptor import EnvironmentDescriptor

logger = logging.getLogger(__name__)


@dataclass
class ExecutionPlan:
    """Bootstrap actions in the order they must run."""

    operation_id: str = ""
    actions: list[Action] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.actions)


@dataclass
class ExecutionReport:
    """Receipts of one bootstrap run, in plan order."""

    operation_id: str = ""
    receipts: list[Receipt] = field(default_factory=list)
    halted_at: str | None = None   # action that stopped a fail-fast run

    def counts(self) -> Counter[str]:
        """Receipts per status: ``ok``, ``failed``, ``skipped``."""
        return Counter(r.status for r in self.receipts)

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def succeeded(self) -> int:
        return self.counts()["ok"]

    @property
    def failed(self) -> int:
        return self.counts()["failed"]

    @property
    def skipped(self) -> int:
        return self.counts()["skipped"]

    @property
    def changed(self) -> int:
        return sum(1 for r in self.receipts if r.changed)

    @property
    def all_ok(self) -> bool:
        return not self.failed

    @property
    def status(self) -> str:
        """``ok`` if nothing failed, ``failed`` if nothing succeeded, else ``partial``."""
        counts = self.counts()
        if not counts["failed"]:
            return "ok"
        return "partial" if counts["ok"] else "failed"

    def first_failure(self) -> Receipt | None:
        return next((r for r in self.receipts if r.failed), None)

    def to_dict(self) -> dict:
        counts = self.counts()
        return {
            "operation_id": self.operation_id,
            "status": self.status,
            "halted_at": self.halted_at,
            "total": self.total,
            "succeeded": counts["ok"],
            "failed": counts["failed"],
            "skipped": counts["skipped"],
            "changed": self.changed,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


def build_bootstrap_plan(
    descriptor: EnvironmentDescriptor,
    operation_id: str | None = None,
) -> ExecutionPlan:
    """The fixed bootstrap order for a descriptor.

    1. select the default toolchain channel
    2. add each compilation target
    3. add each component
    4. ensure each CLI extension is installed
    5. extra shell-hook lines, if any
    """
    plan = ExecutionPlan(operation_id=operation_id or generate_operation_id())
    toolchain = descriptor.toolchain

    plan.actions.append(
        Action(
            id="toolchain-default",
            name=f"{toolchain.manager} default {toolchain.channel}",
            adapter=toolchain.manager,
            params={"op": "default", "value": toolchain.channel},
        )
    )
    for target in toolchain.targets:
        plan.actions.append(
            Action(
                id=f"target:{target}",
                name=f"{toolchain.manager} target add {target}",
                adapter=toolchain.manager,
                params={"op": "target", "value": target},
            )
        )
    for component in toolchain.components:
        plan.actions.append(
            Action(
                id=f"component:{component}",
                name=f"{toolchain.manager} component add {component}",
                adapter=toolchain.manager,
                params={"op": "component", "value": component},
            )
        )
    for ext in descriptor.extensions:
        plan.actions.append(
            Action(
                id=f"extension:{ext.name}",
                name=f"ensure {ext.host} {ext.name} ({ext.package})",
                adapter="cargo-extension",
                params={
                    "name": ext.name,
                    "package": ext.package,
                    "host": ext.host,
                    "install_timeout": descriptor.install_timeout,
                },
            )
        )
    for index, line in enumerate(descriptor.shell_hook, start=1):
        plan.actions.append(
            Action(
                id=f"hook:{index}",
                name=line,
                adapter="shell",
                params={"command": line},
            )
        )

    return plan


def execute_plan(
    plan: ExecutionPlan,
    registry: AdapterRegistry,
    env: dict[str, str] | None = None,
    dry_run: bool = False,
    continue_on_error: bool = False,
    timeout: int = 120,
) -> ExecutionReport:
    """Execute the plan's actions in order through the registry.

    Args:
        plan: The execution plan.
        registry: Adapter registry for dispatch.
        env: Session environment every action runs in.
        dry_run: Validate but don't execute.
        continue_on_error: Keep going after a failure instead of halting.
        timeout: Per-command timeout in seconds.
    """
    report = ExecutionReport(operation_id=plan.operation_id)

    for action in plan.actions:
        if report.halted_at is not None:
            report.receipts.append(
                Receipt.skip(
                    adapter=action.adapter,
                    action_id=action.id,
                    reason=f"Not run: '{report.halted_at}' failed",
                )
            )
            continue

        receipt = registry.execute_action(action, env=env, dry_run=dry_run, timeout=timeout)
        report.receipts.append(receipt)

        logger.info("%s %s → %s", receipt.marker, action.label, receipt.status)

        if receipt.failed and not continue_on_error:
            report.halted_at = action.id
            logger.error("Bootstrap halted at %s: %s", action.id, receipt.error)

    return report


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"boot-{now}-{short}"
