"""
Adapters — receipt-returning bindings to the external tools the
installer drives (OS package manager, git, npm/yarn, shell).
"""

from levboot.adapters.base import Adapter, ExecutionContext
from levboot.adapters.languages.node import NodeAdapter
from levboot.adapters.mock import MockAdapter
from levboot.adapters.packages.system import SystemPackageAdapter
from levboot.adapters.registry import AdapterRegistry
from levboot.adapters.shell.command import ShellCommandAdapter
from levboot.adapters.vcs.git import GitAdapter


def default_registry() -> AdapterRegistry:
    """Registry with every real adapter registered."""
    registry = AdapterRegistry()
    for adapter in (
        ShellCommandAdapter(),
        SystemPackageAdapter(),
        GitAdapter(),
        NodeAdapter(),
    ):
        registry.register(adapter)
    return registry


__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "GitAdapter",
    "MockAdapter",
    "NodeAdapter",
    "ShellCommandAdapter",
    "SystemPackageAdapter",
    "default_registry",
]
