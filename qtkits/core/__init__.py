"""
Core functionality for qtkits.

This package contains the foundational modules that other components depend on.
"""

from .exceptions import (
    QtKitsError,
    ConfigurationError,
    RegistryError,
    RegistryWriteError,
    RegistryLockTimeout,
    StateError,
    InstallationError,
    ToolchainFileNotFoundError,
)

from .state import (
    KitSource,
    Scope,
    ScopedState,
    StateStore,
)

from .config import (
    AdditionalQtPath,
    QtKitsConfig,
    load_global_config,
    load_workspace_config,
)

__all__ = [
    "QtKitsError",
    "ConfigurationError",
    "RegistryError",
    "RegistryWriteError",
    "RegistryLockTimeout",
    "StateError",
    "InstallationError",
    "ToolchainFileNotFoundError",
    "KitSource",
    "Scope",
    "ScopedState",
    "StateStore",
    "AdditionalQtPath",
    "QtKitsConfig",
    "load_global_config",
    "load_workspace_config",
]
