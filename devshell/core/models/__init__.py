"""
Domain models — Pydantic types for the dev shell provisioner.

All models are re-exported here for convenient access:

    from devshell.core.models import EnvironmentDescriptor, Artifact, Receipt
"""

from devshell.core.models.action import Action, Receipt
from devshell.core.models.dependency import Artifact, ResolvedEnvironment
from devshell.core.models.descriptor import (
    CliExtension,
    EnvironmentDescriptor,
    ToolchainSettings,
)
from devshell.core.models.platform import Platform

__all__ = [
    # action.py
    "Action",
    # dependency.py
    "Artifact",
    # descriptor.py
    "CliExtension",
    "EnvironmentDescriptor",
    # platform.py
    "Platform",
    "Receipt",
    "ResolvedEnvironment",
    "ToolchainSettings",
]
