"""
Well-known directory and file locations for qtkits.

This module resolves the per-user and per-workspace locations that the kit
engine reads and writes. It is the single place that knows about the host
platform layout.

Directory Structure:
    Global (per user):
        - <user local dir>/CMakeTools/cmake-tools-kits.json : shared kit registry
        - ~/.qtkits/state.json                              : generated kit names
        - ~/.qtkits/config.yaml                             : global configuration

    Workspace (<workspace>/):
        - .vscode/cmake-kits.json : workspace kit registry
        - .qtkits/state.json      : generated kit names for this workspace
        - qtkits.yaml             : workspace configuration

The user local dir is %LOCALAPPDATA% on Windows, ~/Library/Application Support
on macOS and ~/.local/share on Linux.
"""

import os
import platform
from pathlib import Path, PurePath
from typing import Optional

from qtkits.core.exceptions import ConfigurationError

SUPPORTED_SYSTEMS = ("Windows", "Darwin", "Linux")

CMAKE_TOOLS_DIR_NAME = "CMakeTools"
GLOBAL_KITS_FILE_NAME = "cmake-tools-kits.json"
WORKSPACE_KITS_FILE_NAME = "cmake-kits.json"
STATE_DIR_NAME = ".qtkits"
STATE_FILE_NAME = "state.json"
GLOBAL_CONFIG_FILE_NAME = "config.yaml"
WORKSPACE_CONFIG_FILE_NAME = "qtkits.yaml"


def get_host_system(system: Optional[str] = None) -> str:
    """
    Return the host system name, validating that it is supported.

    Args:
        system: Override for platform.system() (used by tests)

    Returns:
        One of 'Windows', 'Darwin', 'Linux'

    Raises:
        ConfigurationError: If the host platform is not supported
    """
    system = system or platform.system()
    if system not in SUPPORTED_SYSTEMS:
        raise ConfigurationError(f"Unsupported host platform: {system}")
    return system


def get_user_local_dir(system: Optional[str] = None) -> Path:
    """
    Get the per-user local application data directory.

    Returns:
        Path: %LOCALAPPDATA% on Windows, ~/Library/Application Support on
        macOS, ~/.local/share on Linux.

    Raises:
        ConfigurationError: If the host platform is unsupported or
            LOCALAPPDATA is not set on Windows.

    Example:
        >>> get_user_local_dir('Linux')
        PosixPath('/home/user/.local/share')
    """
    system = get_host_system(system)
    if system == "Windows":
        local_app_data = os.environ.get("LOCALAPPDATA")
        if not local_app_data:
            raise ConfigurationError(
                "LOCALAPPDATA environment variable is not set. "
                "Cannot determine the user local directory."
            )
        return Path(local_app_data)
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support"
    return Path.home() / ".local" / "share"


def get_global_kits_file(system: Optional[str] = None) -> Path:
    """Path of the kit registry shared with the host build tool."""
    return get_user_local_dir(system) / CMAKE_TOOLS_DIR_NAME / GLOBAL_KITS_FILE_NAME


def get_workspace_kits_file(workspace: Path) -> Path:
    """
    Get the workspace kit registry path.

    Example:
        >>> get_workspace_kits_file(Path('/work/app'))
        PosixPath('/work/app/.vscode/cmake-kits.json')
    """
    if not isinstance(workspace, (Path, PurePath)):
        workspace = Path(workspace)
    return workspace / ".vscode" / WORKSPACE_KITS_FILE_NAME


def get_global_state_dir() -> Path:
    """Directory holding global qtkits state and configuration."""
    return Path.home() / STATE_DIR_NAME


def get_workspace_state_dir(workspace: Path) -> Path:
    if not isinstance(workspace, (Path, PurePath)):
        workspace = Path(workspace)
    return workspace / STATE_DIR_NAME


def get_global_config_file() -> Path:
    return get_global_state_dir() / GLOBAL_CONFIG_FILE_NAME


def get_workspace_config_file(workspace: Path) -> Path:
    return Path(workspace) / WORKSPACE_CONFIG_FILE_NAME
