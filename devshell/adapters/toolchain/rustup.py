"""
Rustup adapter — toolchain manager operations.

Three operations, each idempotent on rustup's side:

    default <channel>         rustup default nightly
    target add <target>       rustup target add wasm32-unknown-unknown
    component add <name>      rustup component add rust-analyzer

Rustup reports "up to date" / "unchanged" when there was nothing to do;
those receipts carry ``changed=False``.
"""

from __future__ import annotations

import logging

from devshell.adapters.base import CommandAdapter, ExecutionContext
from devshell.core.models.action import Receipt

logger = logging.getLogger(__name__)

_OPERATIONS = {
    "default": ["default"],
    "target": ["target", "add"],
    "component": ["component", "add"],
}

_UNCHANGED_MARKERS = ("is up to date", "unchanged", "using existing install")


class RustupAdapter(CommandAdapter):
    """Drive ``rustup``.

    Action params:
        op (str): ``default``, ``target`` or ``component``.
        value (str): channel, target triple or component name.
    """

    binary = "rustup"

    @property
    def name(self) -> str:
        return "rustup"

    @staticmethod
    def command_for(op: str, value: str) -> list[str]:
        return ["rustup", *_OPERATIONS[op], value]

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        op = context.action.params.get("op", "")
        if op not in _OPERATIONS:
            return False, f"Unknown rustup operation: {op!r}"
        if not context.action.params.get("value"):
            return False, "Missing required param: 'value'"
        return self._require_binary(context)

    def execute(self, context: ExecutionContext) -> Receipt:
        op = context.action.params["op"]
        value = context.action.params["value"]
        receipt = self._run(context, self.command_for(op, value))

        if receipt.ok:
            text = f"{receipt.output}\n{receipt.metadata.get('stderr', '')}".lower()
            receipt.changed = not any(marker in text for marker in _UNCHANGED_MARKERS)
            logger.info(
                "rustup %s %s: %s", op, value, "changed" if receipt.changed else "unchanged"
            )
        else:
            logger.warning("rustup %s %s failed: %s", op, value, receipt.error)
        return receipt
