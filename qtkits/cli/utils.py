"""
Shared utilities for CLI commands.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from qtkits.core.config import (
    AdditionalQtPath,
    QtKitsConfig,
    load_global_config,
    load_workspace_config,
)
from qtkits.core.state import Scope
from qtkits.kits.manager import KitManager

logger = logging.getLogger(__name__)


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=sys.stderr)


def resolve_scope(args) -> Scope:
    """Workspace scope when ``--workspace`` was given, else the global scope."""
    workspace = getattr(args, "workspace", None)
    if workspace:
        return Scope.workspace(Path(workspace))
    return Scope.global_scope()


def apply_overrides(config: QtKitsConfig, args) -> QtKitsConfig:
    """Apply ``--qt-root``, ``--qt-path`` and ``--generator`` to a config."""
    qt_root = getattr(args, "qt_root", None)
    if qt_root:
        config.qt_installation_root = str(Path(qt_root).resolve())
    qt_paths = getattr(args, "qt_path", None)
    if qt_paths:
        config.additional_qt_paths = [AdditionalQtPath(path=p) for p in qt_paths]
    generator = getattr(args, "generator", None)
    if generator:
        config.cmake_generator = generator
    return config


def create_manager(args) -> KitManager:
    """
    Build a KitManager for the scope selected on the command line.

    Raises:
        ConfigurationError: On invalid configuration or unsupported platform
    """
    global_config = load_global_config(getattr(args, "config", None))
    scope = resolve_scope(args)
    if scope.is_global:
        apply_overrides(global_config, args)

    kits_file = getattr(args, "kits_file", None)
    manager = KitManager(
        global_config=global_config,
        global_kits_file=Path(kits_file) if kits_file else None,
    )
    if not scope.is_global:
        config = load_workspace_config(scope.folder, global_config)
        manager.add_workspace(scope.folder, apply_overrides(config, args))
    return manager
