"""
Mock adapter — stands in for rustup, cargo and the shell.

Backs ``devshell --mock`` and the engine tests. Every action succeeds
unless scripted otherwise, and the mock keeps the set of actions it
has already applied so a second bootstrap reports nothing changed.
"""

from __future__ import annotations

from devshell.adapters.base import Adapter, ExecutionContext
from devshell.core.models.action import Receipt


class MockAdapter(Adapter):
    """In-memory adapter with scripted failures and idempotent successes."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        output: str | None = None,
    ):
        self._name = adapter_name
        self._available = available
        self._output = output
        self._scripted: dict[str, Receipt] = {}
        self._applied: set[str] = set()
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    def is_available(self) -> bool:
        return self._available

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._scripted[action_id] = receipt

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        self._scripted[action_id] = Receipt.failure(
            adapter=self._name,
            action_id=action_id,
            error=error,
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        action = context.action

        if action.id in self._scripted:
            return self._scripted[action.id].model_copy()

        changed = action.id not in self._applied
        self._applied.add(action.id)
        return Receipt.success(
            adapter=self._name,
            action_id=action.id,
            output=self._output if self._output is not None else f"[mock] {action.label}",
            changed=changed,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Forget calls, scripted responses and applied actions."""
        self.call_log.clear()
        self._scripted.clear()
        self._applied.clear()
