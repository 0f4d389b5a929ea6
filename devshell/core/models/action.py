"""
Action and Receipt models — one bootstrap step and what came of it.

The engine turns the descriptor into Actions, an adapter runs each one,
and a Receipt comes back. Adapter failures travel inside receipts, so
the engine can decide between halting and carrying on.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]

_MARKERS: dict[str, str] = {"ok": "✓", "failed": "✗", "skipped": "⊘"}


class Action(BaseModel):
    """One bootstrap step, addressed to an adapter by name.

    ``params`` are adapter-specific, e.g. ``{"op": "target",
    "value": "wasm32-unknown-unknown"}`` for rustup.
    """

    id: str                         # "target:wasm32-unknown-unknown"
    name: str = ""                  # "rustup target add wasm32-unknown-unknown"
    adapter: str
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def label(self) -> str:
        return self.name or self.id


class Receipt(BaseModel):
    """Result of one adapter execution.

    ``changed`` is false when the step found its work already done; a
    repeated bootstrap should come back ok with nothing changed.
    """

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"
    changed: bool = False

    output: str = ""
    error: str | None = None
    duration_ms: int = 0
    finished_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @property
    def marker(self) -> str:
        return _MARKERS[self.status]

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        """A step that did not run; ``reason`` lands in ``output``."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
