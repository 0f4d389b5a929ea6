"""
Adapter registry — dispatch of bootstrap actions to adapters.

The engine hands every action to the registry, which picks the adapter
named by ``action.adapter`` (or the mock, in mock mode), validates,
and runs it. Whatever happens comes back as a Receipt.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from devshell.adapters.base import Adapter, ExecutionContext
from devshell.adapters.shell.runner import CommandRunner
from devshell.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name, plus mock-mode and dry-run dispatch."""

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode
        self._mock_adapter: Adapter | None = None

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def set_mock_mode(self, enabled: bool, mock_adapter: Adapter | None = None) -> None:
        """Route every action to ``mock_adapter`` (a fresh MockAdapter if None)."""
        self._mock_mode = enabled
        self._mock_adapter = mock_adapter

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter %s", adapter.name)
        self._adapters[adapter.name] = adapter
        logger.debug("Registered adapter: %s", adapter.name)

    def unregister(self, name: str) -> None:
        self._adapters.pop(name, None)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    def adapter_status(self) -> dict[str, dict[str, Any]]:
        """Whether each adapter's external tool is present on this host."""
        status = {}
        for name, adapter in self._adapters.items():
            try:
                available = adapter.is_available()
            except Exception as e:
                logger.debug("Availability check for %s raised: %s", name, e)
                available = False
            status[name] = {
                "name": name,
                "available": available,
                "type": adapter.__class__.__name__,
            }
        return status

    def _adapter_for(self, action: Action) -> Adapter | None:
        if not self._mock_mode:
            return self._adapters.get(action.adapter)
        if self._mock_adapter is None:
            from devshell.adapters.mock import MockAdapter

            self._mock_adapter = MockAdapter()
        return self._mock_adapter

    @staticmethod
    def _check(adapter: Adapter, context: ExecutionContext) -> str | None:
        """Validation error for ``context``, or None when it may run."""
        try:
            is_valid, error_msg = adapter.validate(context)
        except Exception as e:
            return f"Validation error: {e}"
        return None if is_valid else f"Validation failed: {error_msg}"

    def execute_action(
        self,
        action: Action,
        env: dict[str, str] | None = None,
        dry_run: bool = False,
        timeout: int = 120,
    ) -> Receipt:
        """Validate and run ``action`` in the session environment ``env``.

        With ``dry_run`` a valid action is reported as skipped instead
        of run. Never raises.
        """
        start_time = time.monotonic()

        adapter = self._adapter_for(action)
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        context = ExecutionContext(action=action, env=dict(env or {}), dry_run=dry_run, timeout=timeout)

        problem = self._check(adapter, context)
        if problem:
            return Receipt.failure(adapter=action.adapter, action_id=action.id, error=problem)

        if dry_run:
            return Receipt.skip(
                adapter=action.adapter,
                action_id=action.id,
                reason=f"[dry-run] Would run {action.label}",
                metadata={"dry_run": True},
            )

        try:
            receipt = adapter.execute(context)
        except Exception as e:
            logger.error("Adapter %s raised on %s: %s", action.adapter, action.id, e)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        receipt.duration_ms = receipt.duration_ms or int((time.monotonic() - start_time) * 1000)
        return receipt


def default_registry(
    runner: CommandRunner | None = None,
    mock_mode: bool = False,
) -> AdapterRegistry:
    """Registry with every bootstrap adapter, sharing one command runner."""
    from devshell.adapters.shell.command import ShellCommandAdapter
    from devshell.adapters.toolchain.cargo_extension import CargoExtensionAdapter
    from devshell.adapters.toolchain.rustup import RustupAdapter

    registry = AdapterRegistry(mock_mode=mock_mode)
    for adapter in (
        RustupAdapter(runner),
        CargoExtensionAdapter(runner),
        ShellCommandAdapter(runner),
    ):
        registry.register(adapter)
    return registry
