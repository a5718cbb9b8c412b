"""
Centralized exception hierarchy for qtkits.

This module defines all custom exceptions used across the codebase
to provide clear exception semantics.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class QtKitsError(Exception):
    """Base exception for all qtkits errors."""

    pass


class ConfigurationError(QtKitsError):
    """Raised when configuration is invalid or the host platform is unsupported."""

    pass


# ============================================================================
# Registry Exceptions
# ============================================================================


class RegistryError(QtKitsError):
    """Base exception for kit registry errors."""

    pass


class RegistryWriteError(RegistryError):
    """Raised when a kit registry file cannot be written."""

    def __init__(self, registry_file, reason: str = ""):
        self.registry_file = registry_file
        msg = f"Failed to write kit registry: {registry_file}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class RegistryLockTimeout(RegistryError):
    """Raised when a registry lock cannot be acquired within timeout."""

    pass


# ============================================================================
# State Exceptions
# ============================================================================


class StateError(QtKitsError):
    """Base exception for state store errors."""

    pass


# ============================================================================
# Installation Exceptions
# ============================================================================


class InstallationError(QtKitsError):
    """Base exception for per-installation failures."""

    pass


class ToolchainFileNotFoundError(InstallationError):
    """Raised when a required CMake toolchain file is missing."""

    def __init__(self, toolchain_file):
        self.toolchain_file = toolchain_file
        super().__init__(f"Toolchain file not found: {toolchain_file}")
