"""Adapters — bindings for the external tools the provisioner drives.

Public re-exports for convenient access.
"""

from devshell.adapters.base import Adapter, CommandAdapter, ExecutionContext
from devshell.adapters.mock import MockAdapter
from devshell.adapters.registry import AdapterRegistry, default_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "CommandAdapter",
    "ExecutionContext",
    "MockAdapter",
    "default_registry",
]
